from fastapi import APIRouter, Depends

from core.commands import enqueue_command, snooze_from_notification
from core.schemas import CommandIn, SnoozeIn
from data.repo import Repo
from utils.jsonio import row_json
from app.deps import current_user_id, get_repo

router = APIRouter()

@router.post("/commands", status_code=201)
def commands_create(body: CommandIn, user_id: str = Depends(current_user_id), repo: Repo = Depends(get_repo)):
    return row_json(enqueue_command(repo, user_id, body))

@router.post("/notifications/snooze")
def notification_snooze(body: SnoozeIn, user_id: str = Depends(current_user_id), repo: Repo = Depends(get_repo)):
    """
    Target of the alarm notification's snooze action. The client shows
    ``message`` and then navigates to ``redirectTo`` after ``delaySeconds``,
    whether or not the command was queued.
    """
    out = snooze_from_notification(repo, user_id, body)
    return {
        "ok": out.ok,
        "message": out.message,
        "command": row_json(out.command) if out.command else None,
        "redirectTo": out.redirect_to,
        "delaySeconds": out.delay_seconds,
    }
