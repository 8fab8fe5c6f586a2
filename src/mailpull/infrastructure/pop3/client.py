from __future__ import annotations
import poplib
import ssl
from typing import BinaryIO, Iterable, Optional

from loguru import logger

from mailpull.application.ports.mail_source import MailConnection, MailSource, RemoteMessageInfo
from mailpull.domain.errors import AuthenticationError, MailConnectionError, ProtocolError

POP3_SSL_PORT = 995
LINE_END = b"\r\n"


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def parse_uidl(listings: Iterable[bytes | str]) -> list[RemoteMessageInfo]:
    """Parse UIDL listing lines of the form ``<n> <unique-id>``."""
    infos: list[RemoteMessageInfo] = []
    for raw in listings:
        line = _decode(raw).strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2 or not parts[0].isdigit():
            raise ProtocolError(f"Malformed UIDL line: {line!r}")
        infos.append(RemoteMessageInfo(message_id=int(parts[0]), unique_id=parts[1]))
    return infos


class Pop3Connection(MailConnection):
    """Adapter from ``poplib.POP3`` to the mail connection port."""

    def __init__(self, server: poplib.POP3) -> None:
        self._server: Optional[poplib.POP3] = server

    @property
    def server(self) -> poplib.POP3:
        if self._server is None:
            raise ProtocolError("Connection is closed")
        return self._server

    def authenticate(self, username: str, password: str) -> None:
        try:
            self.server.user(username)
            self.server.pass_(password)
        except poplib.error_proto as e:
            raise AuthenticationError(f"Login failed for {username}: {e}") from e
        except OSError as e:
            raise MailConnectionError(f"Connection lost during login: {e}") from e
        logger.debug(f"Logged in as {username}")

    def list_messages(self) -> list[RemoteMessageInfo]:
        try:
            _, listings, _ = self.server.uidl()
        except poplib.error_proto as e:
            raise ProtocolError(f"UIDL failed: {e}") from e
        except OSError as e:
            raise MailConnectionError(f"Connection lost during UIDL: {e}") from e
        return parse_uidl(listings)

    def fetch_header(self, message_id: int, lines: int = 0) -> str:
        try:
            _, header_lines, _ = self.server.top(message_id, lines)
        except poplib.error_proto as e:
            raise ProtocolError(f"TOP {message_id} failed: {e}") from e
        except OSError as e:
            raise MailConnectionError(f"Connection lost during TOP {message_id}: {e}") from e
        return "\n".join(_decode(line) for line in header_lines)

    def fetch_body(self, message_id: int, writer: BinaryIO) -> None:
        try:
            _, body_lines, _ = self.server.retr(message_id)
        except poplib.error_proto as e:
            raise ProtocolError(f"RETR {message_id} failed: {e}") from e
        except OSError as e:
            raise MailConnectionError(f"Connection lost during RETR {message_id}: {e}") from e
        for line in body_lines:
            writer.write(line)
            writer.write(LINE_END)

    def close(self) -> None:
        if self._server:
            try:
                self._server.quit()
            except (poplib.error_proto, OSError) as e:
                logger.debug(f"Ignoring error on QUIT: {e}")
            self._server = None


class Pop3MailSource(MailSource):
    """Opens POP3 connections, over TLS by default.

    PEM ``certificates`` are trusted on top of the system trust store.
    """

    def __init__(
        self,
        certificates: Iterable[str] = (),
        timeout: Optional[float] = None,
        use_ssl: bool = True,
    ) -> None:
        self.certificates = [c for c in certificates if c.strip()]
        self.timeout = timeout
        self.use_ssl = use_ssl

    def ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if self.certificates:
            context.load_verify_locations(cadata="\n".join(self.certificates))
        return context

    def _open(self, host: str, port: int) -> poplib.POP3:
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        if self.use_ssl:
            return poplib.POP3_SSL(host, port, context=self.ssl_context(), **kwargs)
        return poplib.POP3(host, port, **kwargs)

    def connect(self, host: str, port: int) -> Pop3Connection:
        logger.debug(f"Connecting to {host}:{port} (ssl={self.use_ssl})")
        try:
            server = self._open(host, port)
        except poplib.error_proto as e:
            raise ProtocolError(f"Bad greeting from {host}:{port}: {e}") from e
        except (OSError, ssl.SSLError) as e:
            raise MailConnectionError(f"Could not connect to {host}:{port}: {e}") from e
        return Pop3Connection(server)
