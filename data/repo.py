# pillhub/data/repo.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import StoreError
from data.models import Device, Compartment, DoseEvent, WeightReading, Command

log = structlog.get_logger(__name__)


# -----------------------------
# Repository
# -----------------------------
class Repo:
    """Thin read/write layer over one store session. Nothing is cached across requests."""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, what: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error("store.error", op=what, error=str(e.__cause__ or e))
            raise StoreError(str(e.__cause__ or e)) from e

    # ===== Devices / Compartments (read-only) =====
    def device_by_serial(self, serial: str) -> Optional[Device]:
        return self.session.exec(select(Device).where(Device.serial == serial)).first()

    def device_for_user(self, device_id: str, user_id: str) -> Optional[Device]:
        stmt = select(Device).where(Device.id == device_id, Device.user_id == user_id)
        return self.session.exec(stmt).first()

    def compartment_for_device(self, compartment_id: str, device_id: str) -> Optional[Compartment]:
        stmt = select(Compartment).where(
            Compartment.id == compartment_id, Compartment.device_id == device_id
        )
        return self.session.exec(stmt).first()

    # ===== Telemetry (append-only) =====
    def add_dose_event(self, event: DoseEvent) -> DoseEvent:
        self.session.add(event)
        self._commit("dose_events.insert")
        self.session.refresh(event)
        return event

    def add_weight_readings(self, rows: List[WeightReading]) -> int:
        """Insert the whole batch in one transaction; on failure nothing is kept."""
        self.session.add_all(rows)
        self._commit("weight_readings.insert")
        return len(rows)

    def count_dose_events(self, device_id: str) -> int:
        stmt = select(func.count()).select_from(DoseEvent).where(DoseEvent.device_id == device_id)
        return self.session.exec(stmt).one()

    def count_weight_readings(self, device_id: str) -> int:
        stmt = select(func.count()).select_from(WeightReading).where(WeightReading.device_id == device_id)
        return self.session.exec(stmt).one()

    # ===== Commands =====
    def add_command(self, cmd: Command) -> Command:
        self.session.add(cmd)
        self._commit("commands.insert")
        self.session.refresh(cmd)
        return cmd

    def pending_commands(self, device_id: str) -> List[Command]:
        stmt = (
            select(Command)
            .where(Command.device_id == device_id, Command.status == "pending")
            .order_by(Command.created_at, Command.id)
        )
        return list(self.session.exec(stmt).all())

    def command_for_device(self, command_id: str, device_id: str) -> Optional[Command]:
        stmt = select(Command).where(Command.id == command_id, Command.device_id == device_id)
        return self.session.exec(stmt).first()

    def mark_consumed(self, cmd: Command) -> Command:
        cmd.status = "consumed"
        cmd.consumed_at = datetime.now(timezone.utc)
        self.session.add(cmd)
        self._commit("commands.consume")
        self.session.refresh(cmd)
        return cmd
