# pillhub/push/client.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from core.errors import CollaboratorError

log = structlog.get_logger(__name__)


@dataclass
class PushResult:
    sent: int
    errors: List[str] = field(default_factory=list)


class PushClient:
    """
    Client for the push-dispatch function. It fans a notification out to every
    push target registered for a user and reports how many deliveries succeeded.
    Auth: service role key as a bearer token.
    """
    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, json: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as cli:
            r = await cli.post(f"{self.base}{path}", headers=self._headers, json=json)
            r.raise_for_status()
            return r.json()

    async def send(self, user_id: str, title: str, body: str, data: Dict[str, Any]) -> PushResult:
        payload = {"userId": user_id, "title": title, "body": body, "data": data}
        try:
            result = await self._post("/functions/v1/push-send", payload)
        except httpx.TimeoutException as e:
            log.error("push.failed", user_id=user_id, reason="timeout")
            raise CollaboratorError("Push dispatch timed out") from e
        except httpx.HTTPStatusError as e:
            log.error("push.failed", user_id=user_id, status=e.response.status_code)
            raise CollaboratorError(f"Push dispatch failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            log.error("push.failed", user_id=user_id, reason=type(e).__name__)
            raise CollaboratorError(f"Push dispatch unreachable: {type(e).__name__}") from e
        except ValueError as e:
            log.error("push.failed", user_id=user_id, reason="bad_json")
            raise CollaboratorError("Push dispatch returned a non-JSON response") from e

        if not isinstance(result, dict):
            raise CollaboratorError("Push dispatch returned an unexpected response")

        try:
            sent = int(result.get("sent") or 0)
        except (TypeError, ValueError) as e:
            raise CollaboratorError("Push dispatch returned an invalid sent count") from e
        errors = _error_messages(result.get("errors"))

        # zero recipients is fine; zero sent with any reported failure is not
        if sent == 0 and (errors or result.get("success") is False):
            detail = errors[0] if errors else _error_message(result.get("error", "unknown error"))
            log.error("push.failed", user_id=user_id, reason="collaborator_reported_failure")
            raise CollaboratorError(f"Push dispatch reported failure: {detail}")
        return PushResult(sent=sent, errors=errors)


def _error_message(entry: Any) -> str:
    if isinstance(entry, dict):
        msg = entry.get("error") or entry.get("message")
        if msg:
            return str(msg)
    return str(entry)


def _error_messages(value: Any) -> List[str]:
    """Per-target failures as plain strings; a lone str or dict counts as one entry."""
    if not value:
        return []
    if not isinstance(value, list):
        value = [value]
    return [_error_message(e) for e in value]
