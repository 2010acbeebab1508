import time

import pytest
from fastapi.testclient import TestClient

from categorizer.core.app import create_app
from categorizer.deps import create_container
from categorizer.settings.app import AppSettings
from categorizer.settings.classifier import ClassifierSettings
from categorizer.settings.db import DatabaseSettings
from conftest import VOCABULARY

CSV_CONTENT = (
    "date,description,amount,category\n"
    "02/01/2024,Coffee shop,4.5,Food\n"
    "03/01/2024,Coffee shop,3.9,Food\n"
    "04/01/2024,Gas station,40,Transport\n"
    "05/01/2024,,12,Food\n"
)


@pytest.fixture
def client(tmp_path):
    container = create_container(
        DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", create_schema=True),
        ClassifierSettings(
            categories=VOCABULARY,
            model_dir=tmp_path / "models",
            watch_interval_seconds=3600,
        ),
        AppSettings(app_name="test"),
    )
    with TestClient(create_app(container)) as test_client:
        yield test_client


def _wait_for_classifier(client, timeout=10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        state = client.get("/classifier/state").json()
        if state["has_classifier"] and not state["is_training"]:
            return state
        time.sleep(0.05)
    raise AssertionError("classifier was not initialized in time")


def test_classifier_lifecycle_over_http(client):
    state = _wait_for_classifier(client)
    assert state["is_model_trained"] is False
    assert state["phase"] == "idle_untrained"

    response = client.post("/classifier/predict", json={"description": "Coffee shop"})
    assert response.status_code == 200
    assert response.json() == {"category": "Other"}

    response = client.post("/classifier/train")
    assert response.status_code == 200
    assert response.json()["outcome"] == "insufficient_data"
    assert response.json()["state"]["is_training"] is False

    response = client.post(
        "/transactions/import",
        files={"file": ("transactions.csv", CSV_CONTENT, "text/csv")},
    )
    assert response.status_code == 201
    assert response.json() == {"count": 4}

    response = client.post("/classifier/train")
    body = response.json()
    assert body["outcome"] == "trained"
    assert body["state"]["is_model_trained"] is True
    assert body["state"]["is_training"] is False

    response = client.post("/classifier/predict", json={"description": "Gas station"})
    assert response.json()["category"] in VOCABULARY

    listing = client.get("/transactions", params={"limit": 2}).json()
    assert listing["total"] == 4
    assert len(listing["items"]) == 2


def test_import_rejects_malformed_file(client):
    response = client.post(
        "/transactions/import",
        files={"file": ("broken.csv", "date,amount\nnot-a-date,abc\n", "text/csv")},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Transactions file could not be parsed"}


def test_health_lists_scheduled_jobs(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert {job["id"] for job in body["jobs"]} == {
        "classifier-record-count-watcher",
        "background-transaction-categorizer",
    }
