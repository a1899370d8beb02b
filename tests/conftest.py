import os
import threading

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DEV_MODE", "false")

from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from phishsim import models  # noqa: F401
from phishsim.auth import issue_owner_token
from phishsim.channel import InProcessChannelClient, SimulationClient
from phishsim.database import get_session
from phishsim.deps import get_simulation_client
from phishsim.dispatcher import SendDispatcher
from phishsim.mailer import DeliveryResult

TRACKING_BASE = "http://phish.example.com/phishing/click"


class FakeTransport:
    """Stands in for SMTPTransport; records every outgoing message."""

    def __init__(self, result=None, healthy=True):
        self.sent = []
        self.result = result or DeliveryResult(success=True, message_id="<1@phish.example.com>")
        self.healthy = healthy

    def send(self, message):
        self.sent.append(message)
        return self.result

    def health_check(self):
        if isinstance(self.healthy, Exception):
            raise self.healthy
        return self.healthy


class BlockingDispatcher:
    """A simulation side that never answers until released."""

    def __init__(self):
        self.release = threading.Event()
        self.calls = 0

    def handle_send(self, request):
        self.calls += 1
        self.release.wait(5)
        raise RuntimeError("released")

    def handle_health_check(self):
        self.release.wait(5)
        raise RuntimeError("released")


class StubChannel:
    """Channel returning a canned reply (or raising) and recording requests."""

    def __init__(self, reply=None, error=None, on_request=None):
        self.reply = reply
        self.error = error
        self.on_request = on_request
        self.requests = []

    def request(self, pattern, data=None):
        self.requests.append((pattern, data))
        if self.on_request:
            self.on_request(pattern, data)
        if self.error:
            raise self.error
        return self.reply

    def close(self):
        pass


def auth(owner_id):
    return {"Authorization": f"Bearer {issue_owner_token(owner_id)}"}


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(transport):
    return SendDispatcher(transport, TRACKING_BASE, "security-team@example.com")


@pytest.fixture
def sim_client(dispatcher):
    channel = InProcessChannelClient(dispatcher, timeout=5)
    yield SimulationClient(channel)
    channel.close()


@pytest.fixture
def blocking():
    d = BlockingDispatcher()
    yield d
    d.release.set()


@pytest.fixture
def api(engine, sim_client):
    from phishsim.main import app

    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_simulation_client] = lambda: sim_client
    yield TestClient(app)
    app.dependency_overrides.clear()
