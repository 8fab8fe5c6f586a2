"""Domain models for mailpull."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAIL_DIR = "${HOME}/mail"


class Account(BaseModel):
    """A remote POP3 mailbox. Identified by username."""

    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=0, le=65535)
    username: str
    password: str = Field(repr=False)


class Certificate(BaseModel):
    """A PEM certificate trusted in addition to the system store."""

    name: str
    cert: str


class Config(BaseModel):
    """Accounts, trusted certificates and the base mail directory."""

    accounts: list[Account] = Field(default_factory=list)
    certificates: list[Certificate] = Field(default_factory=list)
    mail_dir: str = DEFAULT_MAIL_DIR

    def add_account(self, account: Account) -> bool:
        """Add an account unless one with the same username exists."""
        if any(item.username == account.username for item in self.accounts):
            return False
        self.accounts.append(account)
        return True

    def remove_account(self, username: str) -> bool:
        before = len(self.accounts)
        self.accounts = [item for item in self.accounts if item.username != username]
        return len(self.accounts) != before

    def add_certificate(self, name: str, cert: str) -> bool:
        """Add a certificate unless one with the same name exists."""
        if any(item.name == name for item in self.certificates):
            return False
        self.certificates.append(Certificate(name=name, cert=cert))
        return True

    def remove_certificate(self, name: str) -> bool:
        before = len(self.certificates)
        self.certificates = [item for item in self.certificates if item.name != name]
        return len(self.certificates) != before

    def mail_path(self, home: Path | None = None) -> Path:
        """Base mail directory with ``${HOME}`` expanded."""
        if home is None:
            try:
                home = Path.home()
            except RuntimeError:
                home = Path(".")
        return Path(self.mail_dir.replace("${HOME}", str(home)))

    def mailbox_path(self, account: Account, home: Path | None = None) -> Path:
        """Directory holding the downloaded messages of ``account``."""
        return self.mail_path(home) / account.username
