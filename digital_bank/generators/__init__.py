"""Synthetic data generators."""

from digital_bank.generators.account import AccountGenerator

__all__ = ["AccountGenerator"]
