# pillhub/core/defaults.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Defaults:
    # dose events
    dose_source: str = "auto"
    enforce_compartment_ownership: bool = True
    # alarm composition
    alarm_title: str = "💊 Hora de tu pastilla"
    compartment_label: str = "Medicamento"
    compartment_idx_placeholder: str = "?"
    alarm_route: str = "/dashboard"
    alarm_action: str = "open_app"
    # commands
    snooze_minutes: int = 5
    # notification click flow
    redirect_route: str = "/dashboard"
    redirect_delay_seconds: float = 1.0


DEFAULTS = Defaults()
