# scripts/smoke.py
# Manual check against a running server: python scripts/smoke.py SER-001 abc123 c1
import sys, time
from datetime import datetime, timezone

import httpx

base = "http://localhost:8000"
serial, secret, compartment = sys.argv[1:4]
now = datetime.now(timezone.utc).isoformat()

t0 = time.perf_counter()
r = httpx.post(f"{base}/weights/bulk", json={
    "serial": serial, "secret": secret,
    "readings": [{"measuredAt": now, "weightG": 1200}, {"measuredAt": now, "weightG": 1195}],
})
print("weights:", r.status_code, r.json())

r = httpx.post(f"{base}/alarm/start", json={
    "serial": serial, "secret": secret, "compartmentId": compartment, "scheduledAt": now,
})
print("alarm:", r.status_code, r.json())

r = httpx.post(f"{base}/devices/commands/pending", json={"serial": serial, "secret": secret})
print("pending:", r.status_code, r.json())
print(f"Time: {(time.perf_counter() - t0)*1000:.1f} ms")
