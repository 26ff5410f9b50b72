# pillhub/core/commands.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.defaults import DEFAULTS
from core.errors import CommandNotFound, DeviceNotFound, PillHubError, ValidationError
from core.schemas import CommandIn, CommandType, SnoozeIn, SnoozePayload
from data.models import Command, Device
from data.repo import Repo

log = structlog.get_logger(__name__)

# command type -> payload model
PAYLOADS: Dict[CommandType, type[BaseModel]] = {
    CommandType.snooze: SnoozePayload,
}


def _normalize_payload(kind: CommandType, payload: Dict[str, Any]) -> Dict[str, Any]:
    model = PAYLOADS[kind]
    try:
        parsed = model.model_validate(payload or {})
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid {kind.value} payload: {fields}") from e
    return parsed.model_dump(by_alias=True, mode="json")


def enqueue_command(repo: Repo, user_id: str, body: CommandIn) -> Command:
    """
    Queue a command for a device the user owns. The device picks it up later
    through the pending-commands poll.
    """
    device = repo.device_for_user(body.device_id, user_id)
    if device is None:
        # same answer for "doesn't exist" and "not yours"
        raise DeviceNotFound()

    cmd = Command(
        device_id=device.id,
        type=body.type.value,
        payload=_normalize_payload(body.type, body.payload),
    )
    cmd = repo.add_command(cmd)
    log.info("command.enqueued", command_id=cmd.id, device_id=device.id, type=cmd.type)
    return cmd


# -----------------------------
# Notification click -> snooze
# -----------------------------
@dataclass
class SnoozeOutcome:
    """Command result and navigation are separate effects; navigation always happens."""
    ok: bool
    message: str
    command: Optional[Command]
    redirect_to: str = DEFAULTS.redirect_route
    delay_seconds: float = DEFAULTS.redirect_delay_seconds


def snooze_from_notification(repo: Repo, user_id: str, body: SnoozeIn) -> SnoozeOutcome:
    minutes = body.minutes if body.minutes is not None else DEFAULTS.snooze_minutes
    try:
        if not body.device_id:
            raise ValidationError("No device ID provided")
        payload = {"minutes": minutes}
        if body.compartment_id:
            payload["compartmentId"] = body.compartment_id
        if body.scheduled_at:
            payload["scheduledAt"] = body.scheduled_at.isoformat()
        cmd = enqueue_command(
            repo, user_id, CommandIn(device_id=body.device_id, type=CommandType.snooze, payload=payload)
        )
    except PillHubError as e:
        log.warning("snooze.failed", device_id=body.device_id, error=e.message)
        return SnoozeOutcome(ok=False, message=e.message, command=None)
    return SnoozeOutcome(ok=True, message=f"La alarma se ha pospuesto {minutes} minutos", command=cmd)


# -----------------------------
# Device side: poll + acknowledge
# -----------------------------
def pending_commands(repo: Repo, device: Device) -> List[Command]:
    return repo.pending_commands(device.id)


def consume_command(repo: Repo, device: Device, command_id: str) -> Command:
    cmd = repo.command_for_device(command_id, device.id)
    if cmd is None:
        raise CommandNotFound()
    if cmd.status == "consumed":
        return cmd
    cmd = repo.mark_consumed(cmd)
    log.info("command.consumed", command_id=cmd.id, device_id=device.id)
    return cmd
