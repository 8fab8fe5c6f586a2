"""Command line interface: manage accounts and certificates, fetch mail."""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path
from typing import Callable, Optional

from loguru import logger
from pydantic import ValidationError

from mailpull import __version__
from mailpull.application.ports.mail_source import MailSource
from mailpull.application.use_cases.fetch_mail import Mailbox, PersistMode
from mailpull.domain.errors import MailpullError
from mailpull.domain.models import Account, Config
from mailpull.infrastructure import ConfigFile, Settings, get_settings
from mailpull.infrastructure.pop3 import POP3_SSL_PORT, Pop3MailSource

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def read_value(prompt: str, input_fn: Optional[Callable[[str], str]] = None) -> str:
    return (input_fn or input)(f"{prompt}: ").strip()


def read_password(prompt: str) -> str:
    return getpass.getpass(f"{prompt}: ")


# Account commands


def add_account(config_file: ConfigFile, input_fn: Optional[Callable[[str], str]] = None,
                password_fn: Optional[Callable[[str], str]] = None) -> int:
    input_fn = input_fn or input
    password_fn = password_fn or read_password
    try:
        username = read_value("Mail Address", input_fn)
        host = read_value("Host", input_fn)
        port_text = read_value(f"Port [{POP3_SSL_PORT}]", input_fn) or str(POP3_SSL_PORT)
        try:
            port = int(port_text)
        except ValueError:
            print(f"error: invalid port: {port_text}", file=sys.stderr)
            return 1
        password = password_fn("Password")
    except (EOFError, KeyboardInterrupt):
        print("\nerror: account not added", file=sys.stderr)
        return 1

    try:
        account = Account(host=host, port=port, username=username, password=password)
    except ValidationError as e:
        print(f"error: invalid account: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    config = config_file.load()
    if not config.add_account(account):
        logger.warning(f"Account {username} already exists, not changed")
    config_file.save(config)
    return 0


def remove_account(config_file: ConfigFile, username: str) -> int:
    config = config_file.load()
    if not config.remove_account(username):
        logger.warning(f"No account {username}")
    config_file.save(config)
    return 0


def list_accounts(config_file: ConfigFile) -> int:
    for account in config_file.load().accounts:
        print(f"{account.username}: {account.host}:{account.port}")
    return 0


# Certificate commands


def add_cert(config_file: ConfigFile, name: str, filename: str) -> int:
    contents = Path(filename).read_text(encoding="utf-8")
    config = config_file.load()
    if not config.add_certificate(name, contents):
        logger.warning(f"Certificate {name} already exists, not changed")
    config_file.save(config)
    return 0


def remove_cert(config_file: ConfigFile, name: str) -> int:
    config = config_file.load()
    if not config.remove_certificate(name):
        logger.warning(f"No certificate {name}")
    config_file.save(config)
    return 0


def list_certs(config_file: ConfigFile) -> int:
    for cert in config_file.load().certificates:
        print(cert.name)
    return 0


# Fetching


def make_source(config: Config, settings: Settings) -> MailSource:
    return Pop3MailSource(
        certificates=[c.cert for c in config.certificates],
        timeout=settings.timeout,
    )


def fetch_accounts(
    config: Config,
    source: MailSource,
    persist_mode: PersistMode = PersistMode.MESSAGE,
    keep_going: bool = False,
    echo: Callable[[str], None] = print,
    home: Optional[Path] = None,
) -> int:
    """Fetch every configured account in order. Returns the number of failed accounts.

    Without ``keep_going`` the first failure propagates.
    """
    failures = 0
    for account in config.accounts:
        try:
            mailbox = Mailbox(config.mailbox_path(account, home), persist_mode=persist_mode, echo=echo)
            result = mailbox.fetch(account, source)
        except (MailpullError, OSError) as e:
            if not keep_going:
                raise
            failures += 1
            logger.error(f"Account {account.username} failed: {e}")
            print(f"error: {account.username}: {e}", file=sys.stderr)
            continue

        for warning in result.warnings:
            logger.warning(f"{account.username}: known-id store not persisted: {warning}")
    return failures


def fetch(config_file: ConfigFile, settings: Settings, persist: Optional[str] = None,
          keep_going: Optional[bool] = None) -> int:
    config = config_file.load()
    if not config.accounts:
        logger.warning(f"No accounts configured in {config_file.path}")
        return 0

    failures = fetch_accounts(
        config,
        make_source(config, settings),
        persist_mode=PersistMode(persist or settings.persist_mode),
        keep_going=settings.keep_going if keep_going is None else keep_going,
    )
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mailpull", description="Download new mail from POP3 accounts")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Configuration file (default: ~/.mail.json)")
    parser.add_argument("--log-level", default=None, help="Log level (default: WARNING)")

    commands = parser.add_subparsers(dest="command", required=True)

    account = commands.add_parser("account", help="Manage accounts")
    account_commands = account.add_subparsers(dest="action", required=True)
    account_commands.add_parser("add", help="Add an account (prompts for details)")
    account_remove = account_commands.add_parser("remove", help="Remove an account")
    account_remove.add_argument("email")
    account_commands.add_parser("list", help="List accounts")

    cert = commands.add_parser("cert", help="Manage trusted certificates")
    cert_commands = cert.add_subparsers(dest="action", required=True)
    cert_add = cert_commands.add_parser("add", help="Trust a PEM certificate")
    cert_add.add_argument("name")
    cert_add.add_argument("filename")
    cert_remove = cert_commands.add_parser("remove", help="Remove a certificate")
    cert_remove.add_argument("name")
    cert_commands.add_parser("list", help="List certificates")

    fetch_parser = commands.add_parser("fetch", help="Download new mail for all accounts")
    fetch_parser.add_argument("--keep-going", action="store_true", default=None,
                              help="Continue with remaining accounts after a failure")
    fetch_parser.add_argument("--persist", choices=[m.value for m in PersistMode], default=None,
                              help="Save known ids after each message or once per account")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> int:
    config_file = ConfigFile(args.config or settings.config_path)

    if args.command == "account":
        if args.action == "add":
            return add_account(config_file)
        if args.action == "remove":
            return remove_account(config_file, args.email)
        return list_accounts(config_file)

    if args.command == "cert":
        if args.action == "add":
            return add_cert(config_file, args.name, args.filename)
        if args.action == "remove":
            return remove_cert(config_file, args.name)
        return list_certs(config_file)

    return fetch(config_file, settings, persist=args.persist, keep_going=args.keep_going)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``mailpull`` command."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        return run(args, settings)
    except (MailpullError, OSError) as e:
        logger.debug(f"{type(e).__name__}: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
