# pillhub/core/credentials.py
"""
Device authentication.

Devices are provisioned with a shared secret; the store only keeps the
lowercase hex SHA-256 of its UTF-8 bytes. Verification recomputes that
digest per call, so nothing about hashing is shared between requests.
"""
from __future__ import annotations

import hashlib
import hmac

import structlog

from core.errors import DeviceNotFound, InvalidCredentials, ValidationError
from data.models import Device
from data.repo import Repo

log = structlog.get_logger(__name__)


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def secret_matches(stored_digest: str, presented_secret: str) -> bool:
    if not stored_digest:
        return False
    expected = stored_digest.strip().lower().encode("utf-8")
    return hmac.compare_digest(expected, hash_secret(presented_secret).encode("utf-8"))


def verify_device(repo: Repo, serial: str, secret: str) -> Device:
    """Return the device for ``serial`` if ``secret`` matches its stored digest."""
    if not serial or not secret:
        raise ValidationError("Missing required fields")

    device = repo.device_by_serial(serial)
    if device is None:
        log.warning("auth.failed", serial=serial, reason="unknown_serial")
        raise DeviceNotFound()

    if not secret_matches(device.secret, secret):
        log.warning("auth.failed", serial=serial, reason="secret_mismatch")
        raise InvalidCredentials()
    return device
