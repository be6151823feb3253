"""
Config Module - Black Box Interface

Purpose: Client configuration management
Interface: ConfigProvider, EnvConfigProvider
Hidden: Environment parsing, defaults, validation

Can be replaced with any provider satisfying the ConfigProvider protocol.
"""

from .provider import (
    CancellationConfig,
    ConfigProvider,
    EnvConfigProvider,
    LoggingConfig,
    TransportConfig,
)

__all__ = [
    "CancellationConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "LoggingConfig",
    "TransportConfig",
]
