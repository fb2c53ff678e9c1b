from typing import Any, List, Dict
from datetime import datetime, timezone
from uuid import UUID


def current_timestamp() -> datetime:
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format datetime for storage and API responses"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def is_uuid(value: Any) -> bool:
    try:
        UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def unique(values: List[Any]) -> List[Any]:
    """Deduplicate while keeping first-seen order"""
    seen: Dict[Any, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)

