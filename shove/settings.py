"""Process settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from shove.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping

logger = get_logger("settings")

DEFAULT_CONFIG_PATH = "./shove.yaml"

# Removed from the environment before serving so child processes never see them
SCRUBBED_VARIABLES = ("SHOVE_CONFIG", "SHOVE_SECRET", "SHOVE_PORT")


class SettingsError(Exception):
    """Raised when required settings are missing or invalid."""

    pass


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the shove server."""

    config_path: Path
    secret_key: str = field(repr=False)
    port: int

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from the environment.

        Args:
            environ: Environment to read from. Defaults to os.environ.

        Returns:
            Settings instance.

        Raises:
            SettingsError: If SHOVE_SECRET or SHOVE_PORT is missing or invalid.
        """
        if environ is None:
            environ = os.environ

        config_path = environ.get("SHOVE_CONFIG", "")
        if not config_path:
            logger.info("SHOVE_CONFIG not set, using default", extra={"path": DEFAULT_CONFIG_PATH})
            config_path = DEFAULT_CONFIG_PATH

        secret_key = environ.get("SHOVE_SECRET", "")
        if not secret_key:
            raise SettingsError("missing environment variable: SHOVE_SECRET")

        port_str = environ.get("SHOVE_PORT", "")
        if not port_str:
            raise SettingsError("missing environment variable: SHOVE_PORT")
        if not (port_str.isascii() and port_str.isdigit()):
            raise SettingsError(f"invalid SHOVE_PORT: {port_str!r} is not an integer")
        port = int(port_str, 10)
        if not 0 <= port <= 65535:
            raise SettingsError(f"invalid SHOVE_PORT: {port} is out of range")

        return cls(config_path=Path(config_path), secret_key=secret_key, port=port)


def scrub_environ(environ: MutableMapping[str, str] | None = None) -> None:
    """Remove shove's own settings from the environment.

    Args:
        environ: Environment to modify. Defaults to os.environ.
    """
    if environ is None:
        environ = os.environ
    for name in SCRUBBED_VARIABLES:
        environ.pop(name, None)
