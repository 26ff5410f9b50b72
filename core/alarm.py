# pillhub/core/alarm.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import structlog

from core.credentials import verify_device
from core.defaults import DEFAULTS
from core.schemas import AlarmIn
from data.models import Compartment, Device
from data.repo import Repo
from push.client import PushClient
from utils.env import Settings
from utils.jsonio import as_utc

log = structlog.get_logger(__name__)

# language -> (am, pm) suffix for 12-hour clocks; anything else renders HH:MM
_TWELVE_HOUR = {
    "es": ("a.m.", "p.m."),
    "en": ("AM", "PM"),
}

@dataclass
class Notification:
    title: str
    body: str
    data: Dict[str, Any]

@dataclass
class AlarmResult:
    success: bool
    notifications_sent: int
    errors: List[str] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "notificationsSent": self.notifications_sent}
        if self.errors:
            out["errors"] = self.errors
        return out

def render_time(scheduled_at: datetime, tz_name: str, locale: str) -> str:
    """Clock time of ``scheduled_at`` in the configured zone, e.g. ``08:00 a.m.`` for es-MX."""
    local = as_utc(scheduled_at).astimezone(ZoneInfo(tz_name))
    suffixes = _TWELVE_HOUR.get(locale.split("-")[0].lower())
    if suffixes is None:
        return local.strftime("%H:%M")
    hour = local.hour % 12 or 12
    return f"{hour:02d}:{local.minute:02d} {suffixes[0] if local.hour < 12 else suffixes[1]}"

def compose_alarm(
    device: Device,
    compartment: Optional[Compartment],
    body: AlarmIn,
    tz_name: str,
    locale: str,
) -> Notification:
    label = body.title or (compartment.title if compartment and compartment.title else None)
    label = label or DEFAULTS.compartment_label
    idx = compartment.idx if compartment is not None else DEFAULTS.compartment_idx_placeholder
    time_str = render_time(body.scheduled_at, tz_name, locale)

    data: Dict[str, Any] = {
        "route": DEFAULTS.alarm_route,
        "deviceId": device.id,
        "compartmentId": body.compartment_id,
        "scheduledAt": as_utc(body.scheduled_at).isoformat(),
        "action": DEFAULTS.alarm_action,
    }
    if body.schedule_id:
        data["scheduleId"] = body.schedule_id

    return Notification(
        title=DEFAULTS.alarm_title,
        body=f"{label} - {time_str} (compartimento {idx})",
        data=data,
    )

async def dispatch_alarm(repo: Repo, push: PushClient, body: AlarmIn, settings: Settings) -> AlarmResult:
    """
    Notify the device owner that a dose is due. Missing compartment metadata
    degrades to a generic label; push failures raise CollaboratorError.
    """
    device = verify_device(repo, body.serial, body.secret)
    compartment = repo.compartment_for_device(body.compartment_id, device.id)
    if compartment is None:
        log.info("alarm.compartment_missing", device_id=device.id, compartment_id=body.compartment_id)

    note = compose_alarm(device, compartment, body, settings.alarm_timezone, settings.alarm_locale)
    result = await push.send(device.user_id, note.title, note.body, note.data)

    log.info("alarm.sent", device_id=device.id, sent=result.sent, errors=len(result.errors))
    return AlarmResult(success=True, notifications_sent=result.sent, errors=result.errors)
