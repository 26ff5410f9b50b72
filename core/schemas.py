# pillhub/core/schemas.py
"""
Wire models for everything devices and the app send us. Field names are
camelCase on the wire (``compartmentId``) and snake_case in Python.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from core.defaults import DEFAULTS


class DoseStatus(str, Enum):
    taken = "taken"
    missed = "missed"
    skipped = "skipped"
    snoozed = "snoozed"


class DoseSource(str, Enum):
    auto = "auto"
    manual = "manual"


class CommandType(str, Enum):
    snooze = "snooze"


# statuses that mean the dose was actually dispensed/taken
COMPLETION_STATUSES = {DoseStatus.taken}


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeviceAuthIn(WireModel):
    serial: str = Field(min_length=1)
    secret: str = Field(min_length=1)


class DoseEventIn(DeviceAuthIn):
    compartment_id: str = Field(min_length=1)
    scheduled_at: datetime
    status: DoseStatus
    actual_at: Optional[datetime] = None
    delta_weight_g: Optional[float] = None
    source: DoseSource = DoseSource(DEFAULTS.dose_source)
    notes: Optional[str] = None
    schedule_id: Optional[str] = None

    @model_validator(mode="after")
    def _completion_fields(self) -> "DoseEventIn":
        if self.status not in COMPLETION_STATUSES:
            if self.actual_at is not None or self.delta_weight_g is not None:
                raise ValueError(
                    f"actualAt/deltaWeightG are only accepted with status in "
                    f"{sorted(s.value for s in COMPLETION_STATUSES)}"
                )
        return self


class WeightReadingIn(WireModel):
    measured_at: datetime
    weight_g: float
    raw: Optional[Any] = None


class WeightBatchIn(DeviceAuthIn):
    readings: List[WeightReadingIn] = Field(min_length=1)


class AlarmIn(DeviceAuthIn):
    compartment_id: str = Field(min_length=1)
    scheduled_at: datetime
    schedule_id: Optional[str] = None
    title: Optional[str] = None


class CommandIn(WireModel):
    device_id: str = Field(min_length=1)
    type: CommandType
    payload: Dict[str, Any] = Field(default_factory=dict)


class SnoozePayload(WireModel):
    minutes: int = Field(default=DEFAULTS.snooze_minutes, gt=0)
    compartment_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class SnoozeIn(WireModel):
    device_id: Optional[str] = None
    compartment_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    minutes: Optional[int] = None
