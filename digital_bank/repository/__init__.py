"""Account repositories."""

from digital_bank.repository.base import AccountRepository
from digital_bank.repository.memory import InMemoryAccountRepository

__all__ = ["AccountRepository", "InMemoryAccountRepository"]
