import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.main import create_app
from core.credentials import hash_secret
from core.session import issue_token
from data.models import Compartment, Device
from data.repo import Repo
from push.client import PushClient
from utils.env import Settings

JWT_SECRET = "test_secret_key_at_least_32_characters"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        push_base_url="http://push.test",
        service_key="service-key",
        jwt_secret=JWT_SECRET,
        alarm_timezone="America/Mexico_City",
        alarm_locale="es-MX",
        push_timeout=2.0,
        log_level="WARNING",
        cache_loggers=False,
    )


class FakePush:
    """Records push-send calls and answers with a canned response."""
    def __init__(self):
        self.calls = []
        self.reply = httpx.Response(200, json={"sent": 2})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def fake_push():
    return FakePush()


@pytest.fixture
def app(settings, fake_push):
    push = PushClient(
        settings.push_base_url, settings.service_key,
        timeout=settings.push_timeout, transport=httpx.MockTransport(fake_push),
    )
    return create_app(settings, push=push)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session(app, client):
    with Session(app.state.engine) as s:
        yield s


@pytest.fixture
def repo(session):
    return Repo(session)


@pytest.fixture
def device(session):
    d = Device(id="dev-1", user_id="user-1", serial="SER-001", secret=hash_secret("abc123"))
    session.add(d)
    session.add(Compartment(id="c1", device_id="dev-1", idx=1, title="Losartan"))
    session.add(Compartment(id="c2", device_id="dev-1", idx=2, title=None))
    session.commit()
    return d


@pytest.fixture
def other_device(session):
    d = Device(id="dev-2", user_id="user-2", serial="SER-002", secret=hash_secret("zzz999"))
    session.add(d)
    session.add(Compartment(id="c9", device_id="dev-2", idx=1, title="Metformina"))
    session.commit()
    return d


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {issue_token('user-1', JWT_SECRET)}"}
