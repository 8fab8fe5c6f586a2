"""Exceptions raised by mailpull."""

from __future__ import annotations


class MailpullError(Exception):
    """Base exception for all mailpull errors."""

    user_message = "An error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.user_message
        super().__init__(self.message)


class MailConnectionError(MailpullError, ConnectionError):
    """The mail server could not be reached."""

    user_message = "Could not connect to the mail server"


class AuthenticationError(MailpullError):
    """The mail server rejected the credentials."""

    user_message = "Authentication failed"


class ProtocolError(MailpullError):
    """The mail server sent an error or a malformed response."""

    user_message = "Unexpected response from the mail server"


class FetchError(MailpullError):
    """Downloading a single message failed."""

    user_message = "Failed to download message"

    def __init__(self, unique_id: str, message: str | None = None):
        self.unique_id = unique_id
        super().__init__(message or f"{self.user_message} {unique_id}")


class ConfigCorruptionError(MailpullError):
    """The configuration file exists but could not be parsed."""

    user_message = "Configuration file is corrupt"
