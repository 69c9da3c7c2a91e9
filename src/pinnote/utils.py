import math
from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)
