# pillhub/core/ingest.py
from __future__ import annotations

import structlog

from core.credentials import verify_device
from core.defaults import DEFAULTS
from core.errors import ValidationError
from core.schemas import DoseEventIn, WeightBatchIn
from data.models import DoseEvent, WeightReading
from data.repo import Repo
from utils.jsonio import as_utc

log = structlog.get_logger(__name__)


def record_dose_event(repo: Repo, body: DoseEventIn) -> DoseEvent:
    """
    Append one dose event for the authenticated device.
    Every call creates a new row; identical submissions are not merged.
    """
    device = verify_device(repo, body.serial, body.secret)

    if DEFAULTS.enforce_compartment_ownership:
        if repo.compartment_for_device(body.compartment_id, device.id) is None:
            raise ValidationError("Compartment does not belong to this device")

    event = DoseEvent(
        device_id=device.id,
        compartment_id=body.compartment_id,
        schedule_id=body.schedule_id or None,
        scheduled_at=as_utc(body.scheduled_at),
        status=body.status.value,
        actual_at=as_utc(body.actual_at),
        delta_weight_g=body.delta_weight_g,
        source=body.source.value,
        notes=body.notes or None,
    )
    event = repo.add_dose_event(event)
    log.info("dose_event.created", event_id=event.id, device_id=device.id, status=event.status)
    return event


def record_weight_readings(repo: Repo, body: WeightBatchIn) -> int:
    """Insert all readings atomically; returns the number of rows written."""
    device = verify_device(repo, body.serial, body.secret)
    if not body.readings:
        raise ValidationError("readings must be a non-empty list")

    rows = [
        WeightReading(
            device_id=device.id,
            measured_at=as_utc(r.measured_at),
            weight_g=r.weight_g,
            raw=r.raw,
        )
        for r in body.readings
    ]
    inserted = repo.add_weight_readings(rows)
    log.info("weights.inserted", device_id=device.id, count=inserted)
    return inserted
