from __future__ import annotations

import re
from typing import Optional

SUBJECT_PREFIX = "Subject:"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_\- ]")


def extract_subject(header: str) -> Optional[str]:
    """Return the filesystem-safe subject of a raw message header.

    The first trimmed line starting with ``Subject:`` is used. Everything
    after the prefix is kept except characters outside ``[a-zA-Z0-9_- ]``,
    which are dropped. Returns ``None`` when there is no subject line and
    ``""`` when nothing survives the filter.
    """
    for line in header.split("\n"):
        line = line.strip()
        if line.startswith(SUBJECT_PREFIX):
            return _UNSAFE_CHARS.sub("", line[len(SUBJECT_PREFIX):])
    return None
