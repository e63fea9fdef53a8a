"""
Gateway configuration module.

Provides configuration for the HTTP gateway, the token broker, storage
session timeouts and upload staging. Values can be built in code or read
from the environment.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Mapping
import logging
import os


DEFAULT_PORT = 3000
DEFAULT_MAX_UPLOAD = 100 * 1024 * 1024 * 1024  # 100 GiB


def _optional_float(value: Optional[str]) -> Optional[float]:
    """Parse a timeout/TTL value where empty or 0 means disabled."""
    if value is None or value.strip() == '':
        return None
    number = float(value)
    return number if number > 0 else None


def parse_accounts(value: Optional[str]) -> Dict[str, str]:
    """
    Parse an account list of the form ``email:password,email:password``.

    Passwords may contain ':' since only the first one separates the pair.
    """
    accounts: Dict[str, str] = {}
    if not value:
        return accounts
    for item in value.split(','):
        item = item.strip()
        if not item:
            continue
        if ':' not in item:
            raise ValueError(f"Invalid account entry (expected email:password): {item!r}")
        email, password = item.split(':', 1)
        accounts[email.strip()] = password
    return accounts


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    None disables a timeout.
    """
    connect: Optional[float] = 30.0  # Backend session establishment
    transfer_idle: Optional[float] = 60.0  # Max wait for a single download chunk


@dataclass
class TokenConfig:
    """Token lifetime configuration."""
    ttl: Optional[float] = 24 * 60 * 60.0
    max_tokens: Optional[int] = None  # Oldest token evicted when reached


@dataclass
class UploadConfig:
    """Upload staging configuration."""
    max_size: int = DEFAULT_MAX_UPLOAD
    temp_dir: Optional[str] = None
    chunk_size: int = 256 * 1024


@dataclass
class GatewayConfig:
    """
    Complete gateway configuration.

    Centralizes all configuration options for the server.
    """
    host: str = '0.0.0.0'
    port: int = DEFAULT_PORT

    # Storage backend: "memory" or a "package.module:factory" import path
    backend: str = 'memory'
    # Accounts seeded into the in-memory backend
    accounts: Dict[str, str] = field(default_factory=dict)

    static_dir: Optional[str] = None
    log_level: int = logging.INFO

    # Sub-configurations
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    tokens: TokenConfig = field(default_factory=TokenConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)

    @classmethod
    def default(cls) -> 'GatewayConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'GatewayConfig':
        """
        Create configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            GatewayConfig instance
        """
        env = os.environ if environ is None else environ
        config = cls()

        config.host = env.get('HOST', config.host)
        if env.get('PORT'):
            config.port = int(env['PORT'])
        config.backend = env.get('MEGAGATE_BACKEND', config.backend)
        config.accounts = parse_accounts(env.get('MEGAGATE_ACCOUNTS'))
        config.static_dir = env.get('MEGAGATE_STATIC_DIR') or None

        level = env.get('LOG_LEVEL')
        if level:
            config.log_level = getattr(logging, level.upper(), logging.INFO)

        if 'MEGAGATE_TOKEN_TTL' in env:
            config.tokens.ttl = _optional_float(env['MEGAGATE_TOKEN_TTL'])
        if env.get('MEGAGATE_MAX_TOKENS'):
            config.tokens.max_tokens = int(env['MEGAGATE_MAX_TOKENS']) or None

        if 'MEGAGATE_CONNECT_TIMEOUT' in env:
            config.timeouts.connect = _optional_float(env['MEGAGATE_CONNECT_TIMEOUT'])
        if 'MEGAGATE_TRANSFER_TIMEOUT' in env:
            config.timeouts.transfer_idle = _optional_float(env['MEGAGATE_TRANSFER_TIMEOUT'])

        if env.get('MEGAGATE_MAX_UPLOAD'):
            config.upload.max_size = int(env['MEGAGATE_MAX_UPLOAD'])
        config.upload.temp_dir = env.get('MEGAGATE_TEMP_DIR') or None

        return config
