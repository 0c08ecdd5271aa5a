import pytest
from fastapi.testclient import TestClient

from app import app, get_controller, get_upload_dir
from conftest import TEST_CSV, TRAIN_CSV, VALIDATION_CSV, make_controller


@pytest.fixture
def client(tmp_path):
    controller = make_controller()
    app.dependency_overrides[get_controller] = lambda: controller
    app.dependency_overrides[get_upload_dir] = lambda: tmp_path
    yield TestClient(app)
    app.dependency_overrides.clear()


def upload(client, role, name, content):
    return client.post(f"/files/{role}", files={"file": (name, content.encode("utf-8"), "text/csv")})


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_wrong_name_is_rejected(client):
    response = upload(client, "training", "training_data.csv", TRAIN_CSV)

    assert response.status_code == 422
    assert 'Expected: "train.csv"' in response.json()["detail"]
    assert client.get("/status").json()["files"]["training"] is None


def test_stage_out_of_order_is_conflict(client):
    response = client.post("/stages/embed")

    assert response.status_code == 409


def test_guided_run(client):
    assert upload(client, "training", "train.csv", TRAIN_CSV).status_code == 200
    assert upload(client, "testing", "test.csv", TEST_CSV).status_code == 200
    response = upload(client, "validation", "validation.csv", VALIDATION_CSV)
    assert response.json()["payload"]["ready"] is True

    for stage in ("parse", "inspect", "preprocess", "embed", "create_model", "train", "evaluate"):
        response = client.post(f"/stages/{stage}")
        assert response.status_code == 200, response.text

    response = client.post("/predict", json={"text": "I love pizza"})
    assert response.status_code == 200
    assert response.json()["payload"]["label"] == 1

    status = client.get("/status").json()
    assert status["state"] == "PREDICT_READY"
    assert status["vocabulary_size"] == 8
    assert status["messages"]

    assert client.post("/reset").json()["state"] == "AWAITING_FILES"


def test_metrics_endpoint(client):
    client.get("/health")
    response = client.get("/metrics")

    assert response.status_code == 200
    assert b"guided_pipeline_request_latency_seconds" in response.content
