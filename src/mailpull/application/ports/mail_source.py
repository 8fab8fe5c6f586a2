from __future__ import annotations
from dataclasses import dataclass
from typing import BinaryIO, Protocol

@dataclass(frozen=True)
class RemoteMessageInfo:
    # message_id is the session sequence number; unique_id survives sessions
    message_id: int
    unique_id: str

class MailConnection(Protocol):
    def authenticate(self, username: str, password: str) -> None: ...
    def list_messages(self) -> list[RemoteMessageInfo]: ...
    def fetch_header(self, message_id: int, lines: int = 0) -> str: ...
    def fetch_body(self, message_id: int, writer: BinaryIO) -> None: ...
    def close(self) -> None: ...

class MailSource(Protocol):
    def connect(self, host: str, port: int) -> MailConnection: ...
