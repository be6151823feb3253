"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union


@dataclass
class TransportConfig:
    """Editing server connection configuration."""
    server_url: str
    timeout_seconds: float
    verify_ssl: bool
    ca_cert_path: Optional[str] = None
    api_key: Optional[str] = None

    @property
    def verify(self) -> Union[bool, str]:
        """TLS verification setting in the form httpx expects."""
        return self.ca_cert_path if self.ca_cert_path else self.verify_ssl


@dataclass
class CancellationConfig:
    """Error codes and message markers that identify a shutdown-induced cancellation."""
    codes: List[str] = field(default_factory=lambda: ["CANCELLED", "1"])
    messages: List[str] = field(default_factory=lambda: ["Call cancelled"])


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_transport_config(self) -> TransportConfig:
        """Get transport configuration."""
        ...

    def get_cancellation_config(self) -> CancellationConfig:
        """Get benign cancellation classification."""
        ...

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        ...


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_transport_config(self) -> TransportConfig:
        """Get transport configuration from environment variables."""
        timeout_env = os.getenv("BYTEEDIT_TIMEOUT", "30")
        try:
            timeout = float(timeout_env)
        except ValueError:
            raise ValueError(
                f"BYTEEDIT_TIMEOUT must be a number of seconds, got {timeout_env!r}"
            )
        if timeout <= 0:
            raise ValueError(f"BYTEEDIT_TIMEOUT must be positive, got {timeout_env!r}")

        return TransportConfig(
            server_url=os.getenv("BYTEEDIT_SERVER_URL", "http://127.0.0.1:9000").rstrip("/"),
            timeout_seconds=timeout,
            verify_ssl=os.getenv("BYTEEDIT_SSL_VERIFY", "true").lower() == "true",
            ca_cert_path=os.getenv("BYTEEDIT_CA_CERT") or None,
            api_key=os.getenv("BYTEEDIT_API_KEY") or None,
        )

    def get_cancellation_config(self) -> CancellationConfig:
        """Get benign cancellation classification from environment variables."""
        defaults = CancellationConfig()
        codes_env = os.getenv("BYTEEDIT_CANCEL_CODES")
        messages_env = os.getenv("BYTEEDIT_CANCEL_MESSAGES")

        return CancellationConfig(
            codes=_split_list(codes_env) if codes_env is not None else defaults.codes,
            messages=_split_list(messages_env) if messages_env is not None else defaults.messages,
        )

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
