"""Domain models, errors and subject handling."""

from mailpull.domain.errors import (
    AuthenticationError,
    ConfigCorruptionError,
    FetchError,
    MailConnectionError,
    MailpullError,
    ProtocolError,
)
from mailpull.domain.models import Account, Certificate, Config
from mailpull.domain.subject import extract_subject

__all__ = [
    "Account",
    "Certificate",
    "Config",
    "extract_subject",
    # Errors
    "MailpullError",
    "MailConnectionError",
    "AuthenticationError",
    "ProtocolError",
    "FetchError",
    "ConfigCorruptionError",
]
