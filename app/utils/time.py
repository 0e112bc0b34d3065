"""Time helpers shared by models and services."""
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    """Current point in time in UTC."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())
