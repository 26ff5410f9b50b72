# pillhub/data/models.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field, Column, JSON


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ts(nullable: bool = False) -> Column:
    return Column(DateTime(timezone=True), nullable=nullable)


class Device(SQLModel, table=True):
    __tablename__ = "devices"

    id: str = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(index=True)
    serial: str = Field(unique=True, index=True)
    secret: str                  # hex sha256 of the provisioning secret
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_ts())


class Compartment(SQLModel, table=True):
    __tablename__ = "compartments"
    __table_args__ = (UniqueConstraint("device_id", "idx"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    device_id: str = Field(foreign_key="devices.id", index=True)
    idx: int
    title: Optional[str] = None


class DoseEvent(SQLModel, table=True):
    __tablename__ = "dose_events"

    id: str = Field(default_factory=_uuid, primary_key=True)
    device_id: str = Field(foreign_key="devices.id", index=True)
    compartment_id: str = Field(foreign_key="compartments.id")
    schedule_id: Optional[str] = None
    scheduled_at: datetime = Field(sa_column=_ts())
    status: str                  # taken|missed|skipped|snoozed
    actual_at: Optional[datetime] = Field(default=None, sa_column=_ts(nullable=True))
    delta_weight_g: Optional[float] = None
    source: str = "auto"         # auto|manual
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_ts())


class WeightReading(SQLModel, table=True):
    __tablename__ = "weight_readings"

    id: Optional[int] = Field(default=None, primary_key=True)
    device_id: str = Field(foreign_key="devices.id", index=True)
    measured_at: datetime = Field(sa_column=_ts())
    weight_g: float
    raw: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_ts())


class Command(SQLModel, table=True):
    __tablename__ = "commands"

    id: str = Field(default_factory=_uuid, primary_key=True)
    device_id: str = Field(foreign_key="devices.id", index=True)
    type: str                    # snooze
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: str = "pending"      # pending|consumed
    created_at: datetime = Field(default_factory=_utcnow, sa_column=_ts())
    consumed_at: Optional[datetime] = Field(default=None, sa_column=_ts(nullable=True))
