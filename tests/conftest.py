import pytest

import app as app_module
from helpers import FakeGateway
from schemas import Goal


@pytest.fixture
def goals():
    return [
        Goal(id=1, emoji="💪", title="Peak Fitness", description="Achieve my ideal body"),
        Goal(id=2, emoji="🧘", title="Inner Peace", description="Daily meditation practice"),
        Goal(id="custom-3", emoji="🎯", title="Write a Novel"),
    ]


@pytest.fixture
def gateway(monkeypatch):
    fake = FakeGateway()
    monkeypatch.setattr(app_module, "gateway", fake)
    return fake


@pytest.fixture
def client(gateway):
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as client:
        yield client
