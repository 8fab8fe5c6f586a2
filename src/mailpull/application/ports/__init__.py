"""Ports the synchronizer depends on."""

from mailpull.application.ports.known_id_store import KnownIdStore, PersistOutcome
from mailpull.application.ports.mail_source import MailConnection, MailSource, RemoteMessageInfo

__all__ = [
    "KnownIdStore",
    "PersistOutcome",
    "MailConnection",
    "MailSource",
    "RemoteMessageInfo",
]
