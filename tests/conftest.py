from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from assignment_tracker.core.app import TrackerApp
from assignment_tracker.core.db import reset_db
from tests.utils import write_config


@pytest.fixture
def tracker_app(tmp_path):
    reset_db()
    app = TrackerApp(config_path=str(write_config(tmp_path / "tracker")), setup_logging=False)
    yield app
    app.config.cleanup()
    reset_db()


@pytest.fixture
def client(tracker_app):
    with TestClient(tracker_app.create_api()) as test_client:
        yield test_client


@pytest.fixture
def default_user_id(tracker_app) -> int:
    return tracker_app.resolve_user_id()
