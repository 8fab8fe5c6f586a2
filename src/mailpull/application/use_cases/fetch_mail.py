"""Download new messages of one account into its mailbox directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from mailpull.application.ports.known_id_store import KnownIdStore, PersistOutcome
from mailpull.application.ports.mail_source import MailConnection, MailSource, RemoteMessageInfo
from mailpull.domain.errors import FetchError, ProtocolError
from mailpull.domain.models import Account
from mailpull.domain.subject import extract_subject
from mailpull.infrastructure.stores.json_known_id_store import JsonKnownIdStore

MESSAGE_SUFFIX = ".msg"
MAX_NAME_LENGTH = 200


class PersistMode(str, Enum):
    """When the known-id store is written during a fetch cycle."""

    MESSAGE = "message"  # after every downloaded message, and at the end
    CYCLE = "cycle"  # once, after the whole pass


@dataclass
class SyncResult:
    """Outcome of one fetch cycle."""

    account: str
    downloaded: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _safe_name(name: str) -> str:
    return name.replace("/", "_").replace("\\", "_")


def artifact_name(header: str, unique_id: str, taken: set[str] | frozenset[str] = frozenset()) -> str:
    """Choose the file stem for a message.

    The stripped, sanitized subject is used when the header has one,
    otherwise the unique id. A name already in ``taken`` gets the unique id
    appended, followed by a counter while the result is still taken.
    """
    subject = extract_subject(header)
    name = subject.strip() if subject is not None else unique_id
    name = _safe_name(name)[:MAX_NAME_LENGTH]

    base = name
    counter = 1
    while name in taken:
        suffix = f"-{_safe_name(unique_id)}"
        if counter > 1:
            suffix += f"-{counter}"
        name = base[: max(MAX_NAME_LENGTH - len(suffix), 0)] + suffix
        counter += 1
    return name


class Mailbox:
    """Local directory plus known-id state for one account.

    Flow of ``fetch``:
    1. Connect and authenticate
    2. List remote messages (sequence number + unique id)
    3. Skip known unique ids, download the rest to ``<name>.msg``
    4. Record each download in the known-id store and persist it

    Store load/save failures never abort a cycle; they are collected as
    warnings on the result. Everything else propagates.
    """

    def __init__(
        self,
        path: str | Path,
        store: Optional[KnownIdStore] = None,
        persist_mode: PersistMode = PersistMode.MESSAGE,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.path = Path(path)
        self.path.mkdir(parents=True, exist_ok=True)

        self.known_ids = store if store is not None else JsonKnownIdStore(self.path)
        self.persist_mode = PersistMode(persist_mode)
        self.echo = echo

        self._pending_warnings: list[str] = []
        self._note(self.known_ids.load(), self._pending_warnings)

    @staticmethod
    def _note(outcome: PersistOutcome, warnings: list[str]) -> None:
        if outcome.warning:
            warnings.append(outcome.warning)

    def _persist(self, result: SyncResult) -> None:
        self._note(self.known_ids.save(), result.warnings)

    def fetch(self, account: Account, source: MailSource) -> SyncResult:
        """Run one fetch cycle for ``account``."""
        result = SyncResult(account=account.username, warnings=self._pending_warnings)
        self._pending_warnings = []

        logger.info(f"Fetching {account.username} from {account.host}:{account.port}")
        conn = source.connect(account.host, account.port)
        try:
            conn.authenticate(account.username, account.password)
            infos = conn.list_messages()
            logger.info(f"{account.username}: {len(infos)} message(s) on server")

            taken = self.known_ids.names()
            for info in infos:
                if self.known_ids.contains(info.unique_id):
                    self.echo(f"skip {info.unique_id}: already known")
                    result.skipped.append(info.unique_id)
                    continue

                name = self._download(conn, info, taken)
                taken.add(name)
                self.known_ids.record(info.unique_id, name)
                result.downloaded.append((info.unique_id, name))

                if self.persist_mode is PersistMode.MESSAGE:
                    self._persist(result)
        finally:
            conn.close()

        self._persist(result)
        logger.info(
            f"{account.username}: downloaded {len(result.downloaded)}, "
            f"skipped {len(result.skipped)}"
        )
        return result

    def _download(self, conn: MailConnection, info: RemoteMessageInfo, taken: set[str]) -> str:
        """Write one message to disk and return its artifact name."""
        try:
            header = conn.fetch_header(info.message_id, 0)
        except (ProtocolError, OSError) as e:
            raise FetchError(info.unique_id, f"Failed to read header of {info.unique_id}: {e}") from e

        name = artifact_name(header, info.unique_id, taken)
        self.echo(f"download {name}...")

        target = self.path / f"{name}{MESSAGE_SUFFIX}"
        try:
            with target.open("wb") as fh:
                conn.fetch_body(info.message_id, fh)
        except (ProtocolError, OSError) as e:
            raise FetchError(info.unique_id, f"Failed to download {info.unique_id} to {target}: {e}") from e

        logger.debug(f"Wrote {info.unique_id} to {target}")
        return name
