"""API tests for the sync routes."""

from uuid import uuid4

from kakeibo.domain.sync.entities import SyncRun


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRunSync:
    """Tests for POST /api/v1/sync."""

    def test_sync_all_connected(self, client):
        response = client.post("/api/v1/sync", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "partial_success"
        assert data["total_institutions"] == 3
        assert data["success_count"] == 2
        assert data["failure_count"] == 1
        assert data["total_new"] == 3
        assert [r["institution_id"] for r in data["results"]] == [
            "inst-1",
            "inst-2",
            "inst-3",
        ]
        assert data["errors"] == [
            "Institution 3: No transaction connector for institution type: broker"
        ]

    def test_sync_selected_institutions(self, client):
        response = client.post(
            "/api/v1/sync",
            json={"institution_ids": ["inst-2"], "force_full": True},
        )

        data = response.json()
        assert data["status"] == "completed"
        assert data["total_institutions"] == 1
        assert data["results"][0]["new_records"] == 1

    def test_sync_without_body(self, client):
        response = client.post("/api/v1/sync")

        assert response.status_code == 200
        assert response.json()["total_institutions"] == 3

    def test_nothing_to_sync(self, client):
        response = client.post("/api/v1/sync", json={"institution_ids": ["missing"]})

        data = response.json()
        assert data["status"] == "completed"
        assert data["run_id"] is None
        assert data["results"] == []

    def test_conflict_while_running(self, client, history):
        running = SyncRun.create_batch(1).start()
        history.runs[running.id] = running

        response = client.post("/api/v1/sync", json={})

        assert response.status_code == 409
        assert response.json()["code"] == "SYNC_ALREADY_RUNNING"


class TestSyncStatusAndHistory:
    """Tests for status and history routes."""

    def test_status_idle(self, client):
        response = client.get("/api/v1/sync/status")

        assert response.json() == {
            "is_running": False,
            "run_id": None,
            "started_at": None,
            "progress": None,
        }

    def test_history_after_sync(self, client):
        run_id = client.post("/api/v1/sync", json={}).json()["run_id"]

        everything = client.get("/api/v1/sync/history").json()
        batches = client.get("/api/v1/sync/history", params={"batches_only": True}).json()
        failed = client.get("/api/v1/sync/history", params={"status": "failed"}).json()

        assert everything["total"] == 4
        assert batches["total"] == 1
        assert batches["items"][0]["id"] == run_id
        assert failed["items"][0]["institution_id"] == "inst-3"

    def test_history_paging(self, client):
        client.post("/api/v1/sync", json={})

        page = client.get("/api/v1/sync/history", params={"limit": 3}).json()

        assert len(page["items"]) == 3
        assert page["has_more"] is True

    def test_history_rejects_bad_limit(self, client):
        response = client.get("/api/v1/sync/history", params={"limit": 0})

        assert response.status_code == 422

    def test_get_run(self, client):
        run_id = client.post("/api/v1/sync", json={}).json()["run_id"]

        response = client.get(f"/api/v1/sync/history/{run_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "partial_success"
        assert data["institution_type"] == "batch"
        assert data["success_count"] == 2

    def test_get_unknown_run(self, client):
        run_id = uuid4()

        response = client.get(f"/api/v1/sync/history/{run_id}")

        assert response.status_code == 404
        assert response.json() == {
            "detail": f"Sync history not found: {run_id}",
            "code": "SYNC_RUN_NOT_FOUND",
        }


class TestCancelSync:
    def test_cancel_finished_run(self, client):
        run_id = client.post("/api/v1/sync", json={}).json()["run_id"]

        response = client.post(f"/api/v1/sync/{run_id}/cancel")

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "message": "Cannot cancel sync: status is partial_success",
        }

    def test_cancel_running_run(self, client, history):
        run = SyncRun.create_batch(2).start()
        history.runs[run.id] = run

        response = client.post(f"/api/v1/sync/{run.id}/cancel")

        assert response.json() == {
            "success": True,
            "message": "Sync cancelled successfully",
        }
        assert client.get("/api/v1/sync/status").json()["is_running"] is False

    def test_cancel_unknown_run(self, client):
        response = client.post(f"/api/v1/sync/{uuid4()}/cancel")

        assert response.status_code == 404


class TestSchedulerMetrics:
    def test_metrics_include_live_schedules(self, client):
        response = client.get("/api/v1/sync/scheduler/metrics")

        data = response.json()
        assert data["total_executions"] == 0
        assert data["schedules"] == {"global": "0 */6 * * *"}
        assert data["timezone"] == "Asia/Tokyo"

    def test_reset(self, client):
        response = client.post("/api/v1/sync/scheduler/metrics/reset")

        assert response.status_code == 200
        assert response.json()["total_executions"] == 0
