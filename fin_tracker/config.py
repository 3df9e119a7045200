"""Configuration management for fin-tracker."""

from dataclasses import dataclass, field

from fin_tracker.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "fintracker"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class LedgerConfig:
    """Behaviour of the EMI payment flow."""

    payment_source_label: str = "Bank Account"
    # When set, confirming a payment on a completed EMI is refused instead of clamped.
    reject_completed_payments: bool = False


@dataclass
class FinTrackerConfig:
    """Main configuration for fin-tracker."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "FinTrackerConfig":
        """Create config from environment variables."""
        import os

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_int_env("POSTGRES_PORT", "5432"),
            database=os.getenv("POSTGRES_DB", "fintracker"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        ledger = LedgerConfig(
            payment_source_label=os.getenv("PAYMENT_SOURCE_LABEL", "Bank Account"),
            reject_completed_payments=os.getenv("REJECT_COMPLETED_PAYMENTS", "false").lower() == "true",
        )

        return cls(
            postgres=postgres,
            ledger=ledger,
            seed=_int_env("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _int_env(name: str, default: str | None) -> int | None:
    import os

    raw = os.getenv(name, default)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
