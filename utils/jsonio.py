from datetime import datetime, timezone
from typing import Any, Dict

def as_utc(dt: datetime | None) -> datetime | None:
    # naive values are taken to already be UTC
    if dt is None: return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def iso(dt: datetime | None) -> str | None:
    # sqlite hands datetimes back naive; everything is stored in UTC
    dt = as_utc(dt)
    return dt.isoformat() if dt is not None else None

def row_json(row) -> Dict[str, Any]:
    """Store row -> JSON-safe dict with the store's own (snake_case) column names."""
    out = row.model_dump()
    for k, v in out.items():
        if isinstance(v, datetime):
            out[k] = iso(v)
    return out
