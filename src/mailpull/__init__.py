"""mailpull - download new POP3 mail into per-account directories."""

__version__ = "0.1.0"
