"""POP3 mail source."""

from mailpull.infrastructure.pop3.client import (
    POP3_SSL_PORT,
    Pop3Connection,
    Pop3MailSource,
    parse_uidl,
)

__all__ = [
    "POP3_SSL_PORT",
    "Pop3Connection",
    "Pop3MailSource",
    "parse_uidl",
]
