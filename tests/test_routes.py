"""HTTP-level tests for the lifecycle engine API."""
from datetime import datetime, timedelta

from jose import jwt

from lifecycle_engine.config import settings
from lifecycle_engine.domain.enums import CriteriaType
from lifecycle_engine.models import WorkflowHistory

API = "/api/v1"


def admin_headers(sub="admin-42"):
    token = jwt.encode({"sub": sub}, settings.SECRET_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def test_root_and_health(api_client):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/health").json()["status"] == "healthy"


class TestAchievementRoutes:
    def test_check_awards_and_summarises(self, api_client, make_client, make_achievement, add_meal):
        client = make_client()
        make_achievement(CriteriaType.FIRST_MEAL, 1, name="First Bite")
        add_meal(client)

        resp = api_client.post(f"{API}/achievements/check", json={"client_id": client.id, "action_type": "meal"})
        assert resp.status_code == 200
        body = resp.json()
        assert [a["name"] for a in body["newAchievements"]] == ["First Bite"]
        assert body["updatedProgress"][0]["current_value"] == 1

        summary = api_client.get(f"{API}/achievements/{client.id}").json()
        assert summary["total_points"] == 10

    def test_missing_client_id_is_rejected(self, api_client):
        assert api_client.post(f"{API}/achievements/check", json={"action_type": "meal"}).status_code == 422

    def test_unknown_client(self, api_client):
        resp = api_client.post(f"{API}/achievements/check", json={"client_id": 999})
        assert resp.status_code == 404
        assert "999" in resp.json()["detail"]


class TestWorkflowRoutes:
    def test_process_due_accepts_get_and_post(self, api_client, make_client, make_workflow):
        client = make_client()
        make_workflow(client, due_at=datetime.utcnow() - timedelta(minutes=1))

        first = api_client.post(f"{API}/workflow/process-due")
        assert first.status_code == 200
        assert first.json()["results"] == [
            {"client_id": client.id, "status": "success", "action": "send_health_assessment", "error": None},
        ]
        assert api_client.get(f"{API}/workflow/process-due").json()["processed"] == 0

    def test_trigger_stage_records_admin_identity(self, api_client, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client)

        resp = api_client.post(
            f"{API}/workflow/trigger-stage",
            json={"client_id": client.id, "stage": "sleep_card_sent"},
            headers=admin_headers(),
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "workflow_stage": "sleep_card_sent", "next_action": "prepare_action_plan"}
        assert db_session.query(WorkflowHistory).one().triggered_by == "admin-42"

        overview = api_client.get(f"{API}/workflow/{client.id}").json()
        assert overview["workflow_stage"] == "sleep_card_sent"
        assert overview["history"][0]["action"] == "Manual trigger: sleep_card_sent"

    def test_trigger_stage_errors(self, api_client, make_client, make_workflow):
        client = make_client()
        make_workflow(client)
        url = f"{API}/workflow/trigger-stage"

        assert api_client.post(url, json={"client_id": client.id}).status_code == 422
        assert api_client.post(url, json={"client_id": client.id, "stage": ""}).status_code == 422
        assert api_client.post(url, json={"client_id": client.id, "stage": "   "}).status_code == 400
        assert api_client.post(url, json={"client_id": 999, "stage": "stress_card_sent"}).status_code == 404

    def test_invalid_token_falls_back_to_admin(self, api_client, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client)

        api_client.post(
            f"{API}/workflow/trigger-stage",
            json={"client_id": client.id, "stage": "stress_card_sent"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert db_session.query(WorkflowHistory).one().triggered_by == "admin"


class TestCardRoutes:
    def test_send_card(self, api_client, make_client, make_workflow, make_card):
        client = make_client(name="Asha")
        make_workflow(client)
        card = make_card(client, card_type="stress_card", workflow_stage="stress_card_sent")

        resp = api_client.post(
            f"{API}/cards/send",
            json={"card_id": card.id, "display_name": "Stress check-in"},
            headers=admin_headers("coach-9"),
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Stress Assessment Card sent to Asha"}

    def test_unknown_card(self, api_client):
        assert api_client.post(f"{API}/cards/send", json={"card_id": 12345}).status_code == 404

    def test_missing_card_id(self, api_client):
        assert api_client.post(f"{API}/cards/send", json={}).status_code == 422
