import re
from datetime import UTC, datetime

UID_RE = re.compile(r"^[0-9a-f]{16}$")


def is_uid(value: str) -> bool:
    return bool(UID_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)
