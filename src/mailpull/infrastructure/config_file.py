"""JSON configuration file holding accounts, certificates and the mail directory."""

from __future__ import annotations

import json
import os
from contextlib import suppress
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from mailpull.domain.errors import ConfigCorruptionError
from mailpull.domain.models import Config


class ConfigFile:
    """Loads and saves a :class:`Config` at an explicit path."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> Config:
        """Parse the file. Raises ``FileNotFoundError`` or ``ConfigCorruptionError``."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigCorruptionError(f"{self.path}: {e}") from e
        try:
            return Config.model_validate_json(text)
        except ValidationError as e:
            raise ConfigCorruptionError(f"{self.path}: {e}") from e

    def load(self) -> Config:
        """Return the stored config, or the default one if missing or corrupt."""
        try:
            return self.read()
        except FileNotFoundError:
            logger.debug(f"No config at {self.path}, using defaults")
        except ConfigCorruptionError as e:
            logger.warning(f"Ignoring corrupt config: {e}")
        except OSError as e:
            logger.warning(f"Could not read config {self.path}: {e}")
        return Config()

    def save(self, config: Config) -> None:
        """Write ``config`` as indented JSON, replacing the old file. Errors propagate."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            # holds passwords; private from creation
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            os.fchmod(fd, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(config.model_dump(mode="json"), fh, indent=2)
                fh.write("\n")
            os.replace(tmp, self.path)
        except OSError:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise
        logger.debug(f"Saved config to {self.path}")
