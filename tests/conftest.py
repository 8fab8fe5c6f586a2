"""
Shared test fixtures for pytest
"""
from pathlib import Path
from typing import BinaryIO

import pytest
from loguru import logger

from mailpull.application.ports.mail_source import RemoteMessageInfo
from mailpull.domain.errors import AuthenticationError, MailConnectionError, ProtocolError
from mailpull.domain.models import Account
from mailpull.infrastructure.settings import get_settings


class FakeConnection:
    """In-memory mail connection backed by a FakeMailSource"""

    def __init__(self, source):
        self.source = source
        self.closed = False

    def authenticate(self, username, password):
        if self.source.password is not None and password != self.source.password:
            raise AuthenticationError(f"Login failed for {username}")

    def list_messages(self):
        return [
            RemoteMessageInfo(message_id=n, unique_id=uid)
            for n, (uid, _, _) in enumerate(self.source.messages, start=1)
        ]

    def fetch_header(self, message_id, lines=0):
        self.source.header_calls.append(message_id)
        uid = self.source.messages[message_id - 1][0]
        if uid in self.source.header_errors:
            raise self.source.header_errors[uid]
        return self.source.messages[message_id - 1][1]

    def fetch_body(self, message_id, writer: BinaryIO):
        uid = self.source.messages[message_id - 1][0]
        if uid in self.source.fail_on:
            raise ProtocolError(f"RETR {message_id} failed")
        self.source.body_calls.append(message_id)
        writer.write(self.source.messages[message_id - 1][2])

    def close(self):
        self.closed = True


class FakeMailSource:
    """Mail source serving a fixed list of (unique_id, header, body) messages"""

    def __init__(self, messages=None, password=None):
        self.messages = list(messages or [])
        self.password = password
        self.fail_on = set()
        self.header_calls = []
        self.body_calls = []
        self.connections = []
        self.fail_hosts = set()
        self.header_errors = {}

    def add(self, unique_id, subject=None, body=None):
        header = "From: sender@example.com\r\nTo: me@example.com\r\n"
        if subject is not None:
            header += f"Subject: {subject}\r\n"
        data = body if body is not None else (header + "\r\nbody of " + unique_id + "\r\n").encode()
        self.messages.append((unique_id, header, data))
        return self

    def connect(self, host, port):
        if host in self.fail_hosts:
            raise MailConnectionError(f"Could not connect to {host}:{port}")
        conn = FakeConnection(self)
        self.connections.append((host, port, conn))
        return conn


@pytest.fixture
def account():
    """Sample account"""
    return Account(host="pop.example.com", port=995, username="me@example.com", password="secret")


@pytest.fixture
def mail_source():
    """Empty fake mail source"""
    return FakeMailSource()


@pytest.fixture
def mailbox_dir(tmp_path) -> Path:
    """Mailbox directory that does not exist yet"""
    return tmp_path / "mail" / "me@example.com"


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop loguru handlers added by the CLI during a test"""
    yield
    logger.remove()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep settings away from the real home directory and environment"""
    for name in ("CONFIG_PATH", "LOG_LEVEL", "PERSIST_MODE", "TIMEOUT", "KEEP_GOING"):
        monkeypatch.delenv(f"MAILPULL_{name}", raising=False)
    monkeypatch.setenv("MAILPULL_CONFIG_PATH", str(tmp_path / "default-config.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
