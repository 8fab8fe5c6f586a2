from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

@dataclass(frozen=True)
class PersistOutcome:
    # Result of a best-effort load/save; failures are warnings, not errors
    path: Path
    ok: bool = True
    error: Optional[str] = None

    @property
    def warning(self) -> Optional[str]:
        if self.ok:
            return None
        return f"{self.path}: {self.error}"

class KnownIdStore(Protocol):
    def load(self) -> PersistOutcome: ...
    def save(self) -> PersistOutcome: ...
    def contains(self, unique_id: str) -> bool: ...
    def get(self, unique_id: str) -> Optional[str]: ...
    def record(self, unique_id: str, name: str) -> bool: ...
    def names(self) -> set[str]: ...
