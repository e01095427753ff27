import pytest
from fastapi.testclient import TestClient

from pws_history.api.main import create_app
from pws_history.config import AppSettings
from pws_history.ingestion.client import WundergroundClient
from pws_history.tests.fakes import FakeWU


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        wu_api_key="test-key",
        wu_base_url="https://wu.test/v2/pws/history/all",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        static_dir=str(tmp_path / "public"),
    )


@pytest.fixture
def fake_wu() -> FakeWU:
    return FakeWU()


@pytest.fixture
def app(settings, fake_wu):
    app = create_app(settings)
    # stub upstream
    app.state.history_service.client = WundergroundClient(settings, transport=fake_wu.transport())
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
