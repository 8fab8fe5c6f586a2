"""JSON-file store mapping remote unique ids to local artifact names."""

from __future__ import annotations

import json
import os
from contextlib import suppress
from pathlib import Path
from typing import Optional

from loguru import logger

from mailpull.application.ports.known_id_store import KnownIdStore, PersistOutcome


STORE_FILENAME = "uid.json"


class JsonKnownIdStore(KnownIdStore):
    """Known-ID store persisted as ``uid.json`` inside a mailbox directory.

    Persistence is best effort: a missing or unreadable file never blocks
    fetching, it only means already-seen mail may be downloaded again.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self._ids: dict[str, str] = {}

    @property
    def path(self) -> Path:
        return self.directory / STORE_FILENAME

    def __len__(self) -> int:
        return len(self._ids)

    def load(self) -> PersistOutcome:
        """Merge the on-disk mapping into memory. Existing entries win."""
        path = self.path
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            logger.debug(f"No known-id store at {path}")
            return PersistOutcome(path=path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable known-id store {path}: {e}")
            return PersistOutcome(path=path, ok=False, error=str(e))

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            logger.warning(f"Ignoring known-id store {path}: expected an object of strings")
            return PersistOutcome(path=path, ok=False, error="expected a JSON object of strings")

        for unique_id, name in data.items():
            self._ids.setdefault(unique_id, name)

        logger.debug(f"Loaded {len(data)} known ids from {path}")
        return PersistOutcome(path=path)

    def save(self) -> PersistOutcome:
        """Write the full mapping as indented JSON, replacing the old file."""
        path = self.path
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(self._ids, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp, path)
        except OSError as e:
            with suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.warning(f"Failed to save known-id store {path}: {e}")
            return PersistOutcome(path=path, ok=False, error=str(e))

        logger.debug(f"Saved {len(self._ids)} known ids to {path}")
        return PersistOutcome(path=path)

    def contains(self, unique_id: str) -> bool:
        return unique_id in self._ids

    def get(self, unique_id: str) -> Optional[str]:
        return self._ids.get(unique_id)

    def record(self, unique_id: str, name: str) -> bool:
        """Map ``unique_id`` to ``name`` unless it is already known."""
        if unique_id in self._ids:
            return False
        self._ids[unique_id] = name
        return True

    def names(self) -> set[str]:
        return set(self._ids.values())

    def as_dict(self) -> dict[str, str]:
        return dict(self._ids)
