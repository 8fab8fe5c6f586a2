"""Use cases."""

from mailpull.application.use_cases.fetch_mail import (
    Mailbox,
    PersistMode,
    SyncResult,
    artifact_name,
)

__all__ = [
    "Mailbox",
    "PersistMode",
    "SyncResult",
    "artifact_name",
]
