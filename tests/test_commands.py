from core.session import issue_token
from tests.conftest import JWT_SECRET

DEVICE_AUTH = {"serial": "SER-001", "secret": "abc123"}
SNOOZE = {
    "deviceId": "dev-1",
    "type": "snooze",
    "payload": {"compartmentId": "c1", "scheduledAt": "2024-01-01T14:00:00Z"},
}


def test_enqueue_snooze_defaults_minutes(client, device, user_headers):
    r = client.post("/commands", json=SNOOZE, headers=user_headers)
    assert r.status_code == 201
    cmd = r.json()
    assert cmd["device_id"] == "dev-1"
    assert cmd["type"] == "snooze"
    assert cmd["status"] == "pending"
    assert cmd["payload"]["minutes"] == 5
    assert cmd["payload"]["compartmentId"] == "c1"
    assert cmd["payload"]["scheduledAt"].startswith("2024-01-01T14:00:00")

def test_enqueue_explicit_minutes(client, device, user_headers):
    body = {**SNOOZE, "payload": {**SNOOZE["payload"], "minutes": 15}}
    assert client.post("/commands", json=body, headers=user_headers).json()["payload"]["minutes"] == 15

def test_enqueue_rejects_bad_payload(client, device, user_headers):
    body = {**SNOOZE, "payload": {"minutes": 0}}
    r = client.post("/commands", json=body, headers=user_headers)
    assert r.status_code == 400
    assert "minutes" in r.json()["error"]

def test_enqueue_rejects_unknown_type(client, device, user_headers):
    r = client.post("/commands", json={**SNOOZE, "type": "dispense"}, headers=user_headers)
    assert r.status_code == 400

def test_enqueue_requires_session(client, device):
    assert client.post("/commands", json=SNOOZE).status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.post("/commands", json=SNOOZE, headers=bad).status_code == 401

def test_enqueue_only_for_own_devices(client, device, other_device, user_headers):
    r = client.post("/commands", json={**SNOOZE, "deviceId": "dev-2"}, headers=user_headers)
    assert r.status_code == 404
    other = {"Authorization": f"Bearer {issue_token('user-2', JWT_SECRET)}"}
    assert client.post("/commands", json={**SNOOZE, "deviceId": "dev-2"}, headers=other).status_code == 201


# ----- notification click flow -----

def test_snooze_from_notification(client, device, user_headers):
    r = client.post("/notifications/snooze", headers=user_headers, json={
        "deviceId": "dev-1", "compartmentId": "c1", "scheduledAt": "2024-01-01T14:00:00Z",
    })
    out = r.json()
    assert r.status_code == 200
    assert out["ok"] is True
    assert out["message"] == "La alarma se ha pospuesto 5 minutos"
    assert out["command"]["payload"]["minutes"] == 5
    assert out["redirectTo"] == "/dashboard"
    assert out["delaySeconds"] == 1.0

def test_snooze_failure_still_redirects(client, device, user_headers):
    out = client.post("/notifications/snooze", headers=user_headers, json={}).json()
    assert out["ok"] is False
    assert out["message"] == "No device ID provided"
    assert out["command"] is None
    assert out["redirectTo"] == "/dashboard"

def test_snooze_for_foreign_device_fails_softly(client, device, other_device, user_headers):
    out = client.post("/notifications/snooze", headers=user_headers, json={"deviceId": "dev-2"}).json()
    assert out["ok"] is False
    assert out["message"] == "Device not found"
    assert out["redirectTo"] == "/dashboard"


# ----- device consumption -----

def test_device_polls_and_consumes(client, device, user_headers):
    first = client.post("/commands", json=SNOOZE, headers=user_headers).json()
    second = client.post("/commands", json=SNOOZE, headers=user_headers).json()

    pending = client.post("/devices/commands/pending", json=DEVICE_AUTH).json()["commands"]
    assert [c["id"] for c in pending] == [first["id"], second["id"]]

    r = client.post(f"/devices/commands/{first['id']}/consume", json=DEVICE_AUTH)
    assert r.status_code == 200
    assert r.json()["status"] == "consumed"
    assert r.json()["consumed_at"] is not None

    # acknowledging twice is harmless
    again = client.post(f"/devices/commands/{first['id']}/consume", json=DEVICE_AUTH)
    assert again.json()["consumed_at"] == r.json()["consumed_at"]

    pending = client.post("/devices/commands/pending", json=DEVICE_AUTH).json()["commands"]
    assert [c["id"] for c in pending] == [second["id"]]

def test_device_cannot_consume_another_devices_command(client, device, other_device, user_headers):
    cmd = client.post("/commands", json=SNOOZE, headers=user_headers).json()
    r = client.post(f"/devices/commands/{cmd['id']}/consume", json={"serial": "SER-002", "secret": "zzz999"})
    assert r.status_code == 404
    assert r.json() == {"error": "Command not found"}

def test_poll_requires_device_secret(client, device):
    r = client.post("/devices/commands/pending", json={"serial": "SER-001", "secret": "nope"})
    assert r.status_code == 401
