"""Tests for the due sweep and manual stage triggers."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from lifecycle_engine.models import ClientWorkflowState, Message, WorkflowHistory
from lifecycle_engine.services import workflow_scheduler
from lifecycle_engine.services.errors import InvalidStage, WorkflowStateNotFound
from lifecycle_engine.services.workflow_scheduler import (
    find_due_rows, get_workflow_overview, run_due_sweep, trigger_stage,
)

from tests.conftest import NOW


def state_of(db, client):
    db.expire_all()
    return db.query(ClientWorkflowState).filter_by(client_id=client.id).one()


class TestDueSweep:
    def test_hundred_days_chain_over_two_passes(self, db_session, make_client, make_workflow):
        client = make_client(name="Asha")
        make_workflow(client, due_at=NOW - timedelta(minutes=5))

        first = run_due_sweep(db_session, now=NOW)
        assert first == {
            "success": True,
            "processed": 1,
            "results": [{"client_id": client.id, "status": "success", "action": "send_health_assessment"}],
        }
        state = state_of(db_session, client)
        assert state.workflow_stage == "health_assessment_sent"
        assert state.next_action == "send_stress_card"
        assert state.next_action_due_at == NOW + timedelta(hours=2, minutes=30)

        # Nothing is due until the stress card delay has passed
        assert run_due_sweep(db_session, now=NOW + timedelta(hours=1))["processed"] == 0

        later = NOW + timedelta(hours=3)
        run_due_sweep(db_session, now=later)
        state = state_of(db_session, client)
        assert state.workflow_stage == "stress_card_sent"
        assert state.next_action == "send_sleep_card"
        assert state.next_action_due_at == later + timedelta(hours=3, minutes=30)

        messages = db_session.query(Message).filter_by(client_id=client.id).order_by(Message.id).all()
        assert [m.content.split("!")[0] for m in messages] == ["Hi Asha", "Hi Asha"]
        assert "Welcome to the 100-Day Program" in messages[0].content
        assert "stress assessment" in messages[1].content
        assert all(m.sender_type == "system" and m.message_type == "automated" and not m.is_read for m in messages)
        assert messages[1].extra == {"workflow_action": "send_stress_card", "workflow_stage": "stress_card_sent"}

        history = db_session.query(WorkflowHistory).order_by(WorkflowHistory.id).all()
        assert [(h.action, h.workflow_stage, h.triggered_by) for h in history] == [
            ("send_health_assessment", "health_assessment_sent", "system"),
            ("send_stress_card", "stress_card_sent", "system"),
        ]

    def test_consultation_ends_after_assessment(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client, service_type="consultation", stage="consultation_scheduled")

        run_due_sweep(db_session, now=NOW)
        state = state_of(db_session, client)
        assert state.workflow_stage == "health_assessment_sent"
        assert state.next_action is None
        assert state.next_action_due_at is None
        assert run_due_sweep(db_session, now=NOW + timedelta(days=30))["processed"] == 0

    def test_action_plan_clears_schedule_without_message(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client, stage="sleep_card_sent", next_action="prepare_action_plan")

        result = run_due_sweep(db_session, now=NOW)
        assert result["results"][0]["status"] == "success"
        state = state_of(db_session, client)
        assert state.workflow_stage == "sleep_card_sent"
        assert state.next_action is None
        assert state.next_action_due_at is None
        assert db_session.query(Message).count() == 0
        assert db_session.query(WorkflowHistory).one().action == "prepare_action_plan"

    def test_rows_without_due_time_are_ignored(self, db_session, make_client, make_workflow):
        make_workflow(make_client(), due_at=None)
        make_workflow(make_client(), next_action=None)
        make_workflow(make_client(), due_at=NOW + timedelta(seconds=1))
        assert run_due_sweep(db_session, now=NOW)["processed"] == 0

    def test_one_failing_client_does_not_block_others(
        self, db_session, make_client, make_workflow, monkeypatch,
    ):
        clients = [make_client(name=n) for n in ("Asha", "Bilal", "Chen")]
        for c in clients:
            make_workflow(c)
        broken = clients[1]

        real_emit = workflow_scheduler.emit_automated_message

        def flaky_emit(db, client_id, content, metadata=None):
            if client_id == broken.id:
                raise OperationalError("INSERT INTO messages", {}, Exception("connection reset"))
            return real_emit(db, client_id, content, metadata)

        monkeypatch.setattr(workflow_scheduler, "emit_automated_message", flaky_emit)

        result = run_due_sweep(db_session, now=NOW)
        assert result["processed"] == 3
        statuses = {r["client_id"]: r["status"] for r in result["results"]}
        assert statuses == {clients[0].id: "success", broken.id: "error", clients[2].id: "success"}
        error = next(r for r in result["results"] if r["status"] == "error")
        assert "connection reset" in error["error"]

        # The failed client's claim was rolled back, so it is retried next pass
        state = state_of(db_session, broken)
        assert state.workflow_stage is None
        assert state.next_action == "send_health_assessment"
        assert state_of(db_session, clients[2]).workflow_stage == "health_assessment_sent"

    def test_push_failure_does_not_fail_the_sweep(self, db_session, make_client, make_workflow, unreachable_push):
        clients = [make_client(name=n) for n in ("Asha", "Bilal", "Chen")]
        for c in clients:
            make_workflow(c)

        result = run_due_sweep(db_session, now=NOW)
        assert result["processed"] == 3
        assert [r["status"] for r in result["results"]] == ["success"] * 3
        assert len(unreachable_push) == 3
        assert db_session.query(Message).count() == 3
        assert all(state_of(db_session, c).workflow_stage == "health_assessment_sent" for c in clients)

    def test_already_claimed_row_is_skipped(self, db_session, make_client, make_workflow, monkeypatch):
        client = make_client()
        make_workflow(client)
        snapshot = find_due_rows(db_session, NOW)

        # Two overlapping sweeps that observed the same due row
        monkeypatch.setattr(workflow_scheduler, "find_due_rows", lambda db, now: snapshot * 2)
        result = run_due_sweep(db_session, now=NOW)

        assert [r["status"] for r in result["results"]] == ["success", "skipped"]
        assert db_session.query(Message).count() == 1
        assert db_session.query(WorkflowHistory).count() == 1


class TestTriggerStage:
    def test_schedules_follow_up_from_stage(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client, next_action=None, due_at=None)

        result = trigger_stage(db_session, client.id, "stress_card_sent", triggered_by="admin-7", now=NOW)
        assert result == {"workflow_stage": "stress_card_sent", "next_action": "send_sleep_card"}

        state = state_of(db_session, client)
        assert state.stage_completed_at == NOW
        assert state.next_action_due_at == NOW + timedelta(hours=3, minutes=30)

        entry = db_session.query(WorkflowHistory).one()
        assert entry.action == "Manual trigger: stress_card_sent"
        assert entry.triggered_by == "admin-7"

    def test_consultation_assessment_stage_is_terminal(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client, service_type="consultation")

        result = trigger_stage(db_session, client.id, "health_assessment_sent", now=NOW)
        assert result["next_action"] is None
        state = state_of(db_session, client)
        assert state.next_action_due_at is None
        assert db_session.query(WorkflowHistory).one().triggered_by == "admin"

    def test_free_form_stage_overrides_pending_action(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client, stage="health_assessment_sent", next_action="send_stress_card")

        result = trigger_stage(db_session, client.id, "paused_by_coach", now=NOW)
        assert result == {"workflow_stage": "paused_by_coach", "next_action": None}
        assert run_due_sweep(db_session, now=NOW + timedelta(days=1))["processed"] == 0

    def test_missing_workflow_state(self, db_session, make_client):
        client = make_client()
        with pytest.raises(WorkflowStateNotFound):
            trigger_stage(db_session, client.id, "stress_card_sent", now=NOW)

    def test_blank_stage(self, db_session, make_client, make_workflow):
        client = make_client()
        make_workflow(client)
        with pytest.raises(InvalidStage):
            trigger_stage(db_session, client.id, "  ", now=NOW)


def test_overview_lists_history_and_upcoming_chain(db_session, make_client, make_workflow):
    client = make_client()
    make_workflow(client)
    run_due_sweep(db_session, now=NOW)

    overview = get_workflow_overview(db_session, client.id)
    assert overview["workflow_stage"] == "health_assessment_sent"
    assert [h["action"] for h in overview["history"]] == ["send_health_assessment"]
    assert [s["action"] for s in overview["upcoming"]] == ["send_stress_card", "send_sleep_card"]
