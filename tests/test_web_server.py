"""Tests for buildlog.web.server — FastAPI routes.

Uses httpx TestClient; entering the client runs the app lifespan, which
starts the worker pool.
"""

import time
import uuid
from pathlib import Path

import pytest

fastapi = pytest.importorskip("fastapi")
httpx = pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from buildlog import __version__
from buildlog.app import create_services
from buildlog.config import BuildLogConfig
from buildlog.web.protocol import LOG_IN_PROGRESS_MESSAGE, problem_to_dict, task_status_to_dict
from buildlog.web.server import create_app
from buildlog.types import TaskStatus

from conftest import make_build


@pytest.fixture
def client(services):
    app = create_app(services=services)
    with TestClient(app) as c:
        yield c


def _poll(client, task_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/builds/log-status/{task_id}").json()
        if body["status"] != "PENDING" or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


class TestGenerateLog:

    def test_accepted_with_task_id(self, client):
        resp = client.post("/builds/Castle/generate-log")
        assert resp.status_code == 202
        task_id = resp.json()["taskId"]
        assert str(uuid.UUID(task_id)) == task_id

    def test_numeric_identifier(self, client):
        resp = client.post("/builds/2/generate-log")
        assert resp.status_code == 202
        assert _poll(client, resp.json()["taskId"])["status"] == "COMPLETED"

    def test_unknown_build_is_404(self, client):
        resp = client.post("/builds/Ghost/generate-log")
        assert resp.status_code == 404
        body = resp.json()
        assert body["status"] == 404
        assert body["title"] == "Not Found"
        assert "Ghost" in body["detail"]
        assert "taskId" not in body

    def test_rejected_submission_is_503_with_task_id(self, config):
        services = create_services(config, builds=[make_build()])
        # Pool is never started: every submission is rejected.
        app = create_app(services=services)
        client = TestClient(app)

        resp = client.post("/builds/Castle/generate-log")
        assert resp.status_code == 503
        task_id = resp.json()["taskId"]
        assert services.registry.get(task_id).status.value == "FAILED"


class TestEndToEnd:

    def test_castle_flow(self, client):
        task_id = client.post("/builds/Castle/generate-log").json()["taskId"]

        status = _poll(client, task_id)
        assert status["status"] == "COMPLETED"
        assert status["taskId"] == task_id
        assert status["filePath"]
        assert "errorMessage" not in status

        resp = client.get(f"/builds/log-file/{task_id}")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        disposition = resp.headers["content-disposition"]
        assert "attachment" in disposition
        assert "Castle" in disposition
        assert resp.text.startswith("Minecraft Build Log")
        assert "Build Name: Castle" in resp.text

    def test_file_deleted_after_completion(self, client):
        task_id = client.post("/builds/Castle/generate-log").json()["taskId"]
        status = _poll(client, task_id)
        assert status["status"] == "COMPLETED"

        Path(status["filePath"]).unlink()

        resp = client.get(f"/builds/log-file/{task_id}")
        assert resp.status_code == 404


class TestLogStatus:

    def test_malformed_task_id_is_400(self, client):
        resp = client.get("/builds/log-status/not-a-uuid")
        assert resp.status_code == 400
        assert resp.json()["title"] == "Input Error"

    def test_unknown_task_id_is_404(self, client):
        resp = client.get(f"/builds/log-status/{uuid.uuid4()}")
        assert resp.status_code == 404

    def test_failed_task_reports_message(self, client, services):
        task_id = str(uuid.uuid4())
        services.registry.create(task_id)
        services.registry.fail(task_id, "disk full")

        body = client.get(f"/builds/log-status/{task_id}").json()
        assert body == {"taskId": task_id, "status": "FAILED", "errorMessage": "disk full"}


class TestLogFile:

    def test_pending_is_202_with_message(self, client, services):
        task_id = str(uuid.uuid4())
        services.registry.create(task_id, build_name="Castle")

        resp = client.get(f"/builds/log-file/{task_id}")
        assert resp.status_code == 202
        assert resp.json() == {"message": LOG_IN_PROGRESS_MESSAGE}

    def test_failed_is_404(self, client, services):
        task_id = str(uuid.uuid4())
        services.registry.create(task_id)
        services.registry.fail(task_id, "disk full")

        resp = client.get(f"/builds/log-file/{task_id}")
        assert resp.status_code == 404
        assert "disk full" in resp.json()["detail"]

    def test_unknown_is_404(self, client):
        assert client.get(f"/builds/log-file/{uuid.uuid4()}").status_code == 404

    def test_malformed_is_400(self, client):
        assert client.get("/builds/log-file/xyz").status_code == 400


class TestOperational:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["healthy"] is True

    def test_version(self, client):
        assert client.get("/api/version").json() == {"version": __version__}

    def test_metrics(self, client):
        task_id = client.post("/builds/Castle/generate-log").json()["taskId"]
        _poll(client, task_id)

        data = client.get("/builds/log-metrics").json()
        assert data["counters"]["tasks_submitted"] == 1
        assert data["counters"]["tasks_completed"] == 1
        assert data["cache"]["max_size"] == 1000
        assert data["workers"]["max_workers"] == 10


class TestProtocol:

    def test_task_status_omits_unset_fields(self):
        body = task_status_to_dict(TaskStatus.pending("t1"))
        assert body == {"taskId": "t1", "status": "PENDING"}

    def test_problem_drops_none_extras(self):
        body = problem_to_dict(503, "Service Unavailable", "full", taskId=None)
        assert body == {"title": "Service Unavailable", "status": 503, "detail": "full"}


class TestCreateApp:

    def test_from_config_path(self, tmp_path):
        cfg = BuildLogConfig(log_dir=str(tmp_path / "logs"))
        path = tmp_path / "buildlog.yaml"
        cfg.save(path)

        app = create_app(config_path=str(path))
        assert app.state.services.config.log_dir == str(tmp_path / "logs")
