from fastapi import APIRouter, Depends

from core.alarm import dispatch_alarm
from core.commands import consume_command, pending_commands
from core.credentials import verify_device
from core.ingest import record_dose_event, record_weight_readings
from core.schemas import AlarmIn, DeviceAuthIn, DoseEventIn, WeightBatchIn
from data.repo import Repo
from push.client import PushClient
from utils.env import Settings
from utils.jsonio import row_json
from app.deps import get_push, get_repo, get_settings

router = APIRouter()

@router.post("/events/dose")
def events_dose(body: DoseEventIn, repo: Repo = Depends(get_repo)):
    event = record_dose_event(repo, body)
    return row_json(event)

@router.post("/weights/bulk")
def weights_bulk(body: WeightBatchIn, repo: Repo = Depends(get_repo)):
    return {"insertedCount": record_weight_readings(repo, body)}

@router.post("/alarm/start")
async def alarm_start(
    body: AlarmIn,
    repo: Repo = Depends(get_repo),
    push: PushClient = Depends(get_push),
    settings: Settings = Depends(get_settings),
):
    result = await dispatch_alarm(repo, push, body, settings)
    return result.to_json()

# device-side consumption of queued commands
@router.post("/devices/commands/pending")
def device_pending_commands(body: DeviceAuthIn, repo: Repo = Depends(get_repo)):
    device = verify_device(repo, body.serial, body.secret)
    return {"commands": [row_json(c) for c in pending_commands(repo, device)]}

@router.post("/devices/commands/{command_id}/consume")
def device_consume_command(command_id: str, body: DeviceAuthIn, repo: Repo = Depends(get_repo)):
    device = verify_device(repo, body.serial, body.secret)
    return row_json(consume_command(repo, device, command_id))
