"""Configuration management for digital-bank."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from digital_bank.exceptions import ConfigurationError
from digital_bank.models.enums import UnknownFieldPolicy


@dataclass
class KafkaConfig:
    """Kafka producer configuration for ledger events."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "digitalbank"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class LedgerConfig:
    """Ledger operation settings.

    ``repository_timeout`` bounds every repository call made by a ledger
    operation, in seconds. ``None`` disables the bound.
    """

    repository_timeout: float | None = 5.0
    event_topic: str = "banking.ledger-events"
    event_source: str = "digital-bank.ledger"


@dataclass
class QueryConfig:
    """Listing settings."""

    unknown_field_policy: UnknownFieldPolicy = UnknownFieldPolicy.PASS_THROUGH
    default_sort: str = "ownerName:asc"


@dataclass
class OutputConfig:
    """Output configuration for file based sinks."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class DigitalBankConfig:
    """Main configuration for digital-bank."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "DigitalBankConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        try:
            port = int(os.getenv("POSTGRES_PORT", "5432"))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid POSTGRES_PORT: {os.getenv('POSTGRES_PORT')}") from exc

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=port,
            database=os.getenv("POSTGRES_DB", "digitalbank"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        timeout_str = os.getenv("REPOSITORY_TIMEOUT", "5")
        if timeout_str.lower() in ("", "none", "0"):
            timeout = None
        else:
            try:
                timeout = float(timeout_str)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid REPOSITORY_TIMEOUT: {timeout_str}") from exc
            if timeout < 0:
                raise ConfigurationError(f"Invalid REPOSITORY_TIMEOUT: {timeout_str}")

        ledger = LedgerConfig(
            repository_timeout=timeout,
            event_topic=os.getenv("LEDGER_TOPIC", "banking.ledger-events"),
        )

        policy_str = os.getenv("UNKNOWN_FIELD_POLICY", UnknownFieldPolicy.PASS_THROUGH.value)
        try:
            policy = UnknownFieldPolicy(policy_str.upper())
        except ValueError as exc:
            raise ConfigurationError(f"Invalid UNKNOWN_FIELD_POLICY: {policy_str}") from exc

        query = QueryConfig(
            unknown_field_policy=policy,
            default_sort=os.getenv("DEFAULT_SORT", "ownerName:asc"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        log_format = os.getenv("LOG_FORMAT", "standard").lower()
        if log_format not in ("standard", "json"):
            raise ConfigurationError(f"Invalid LOG_FORMAT: {log_format}")

        return cls(
            kafka=kafka,
            postgres=postgres,
            ledger=ledger,
            query=query,
            output=output,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=log_format,
        )
