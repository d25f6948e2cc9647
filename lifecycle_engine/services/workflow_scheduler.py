"""
Workflow scheduler: advances clients through the onboarding chain.

Two entry points:
- run_due_sweep(): batch pass over every workflow row whose next action is
  due. Each row is claimed with a conditional UPDATE narrowed by the
  observed (next_action, next_action_due_at) pair, so overlapping sweeps
  cannot double-send. Rows are isolated from each other: one client's
  failure is recorded and the sweep moves on.
- trigger_stage(): an admin manually moves a client into a stage; the
  follow-up action is scheduled from the stage-keyed table.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from lifecycle_engine.domain.enums import SweepStatus, TriggerSource
from lifecycle_engine.domain.message_templates import render_template_safe, render_title
from lifecycle_engine.domain.workflow_table import (
    automatic_transition, stage_transition, describe_chain,
)
from lifecycle_engine.models import Client, ClientWorkflowState, WorkflowHistory
from lifecycle_engine.services.errors import InvalidStage, WorkflowStateNotFound
from lifecycle_engine.services.messaging import emit_automated_message
from lifecycle_engine.services.push_service import send_push_notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueRow:
    """Snapshot of a due workflow row as observed by the sweep."""
    id: int
    client_id: int
    service_type: str
    workflow_stage: Optional[str]
    next_action: str
    next_action_due_at: datetime


def find_due_rows(db: Session, now: datetime) -> list[DueRow]:
    rows = db.query(ClientWorkflowState).filter(
        ClientWorkflowState.next_action.isnot(None),
        ClientWorkflowState.next_action_due_at.isnot(None),
        ClientWorkflowState.next_action_due_at <= now,
    ).order_by(ClientWorkflowState.next_action_due_at, ClientWorkflowState.id).all()

    return [
        DueRow(
            id=r.id,
            client_id=r.client_id,
            service_type=r.service_type,
            workflow_stage=r.workflow_stage,
            next_action=r.next_action,
            next_action_due_at=r.next_action_due_at,
        )
        for r in rows
    ]


def _client_params(db: Session, client_id: int) -> dict:
    client = db.query(Client).filter(Client.id == client_id).first()
    if client and client.name:
        return {"client_name": client.name}
    return {}


def _advance_due_row(db: Session, row: DueRow, now: datetime) -> Optional[dict]:
    """Apply one automatic hop. Returns None if another sweep claimed the row.

    Caller owns the transaction; on success the returned dict describes the
    message to push once committed.
    """
    transition = automatic_transition(row.service_type, row.next_action)
    next_stage = transition.next_stage.value if transition.next_stage else row.workflow_stage
    next_action = None if transition.is_terminal else transition.next_action.value

    claimed = db.query(ClientWorkflowState).filter(
        ClientWorkflowState.id == row.id,
        ClientWorkflowState.next_action == row.next_action,
        ClientWorkflowState.next_action_due_at == row.next_action_due_at,
    ).update({
        "workflow_stage": next_stage,
        "stage_completed_at": now,
        "next_action": next_action,
        "next_action_due_at": transition.due_at(now),
        "updated_at": now,
    }, synchronize_session=False)
    if claimed != 1:
        return None

    push = None
    if transition.message_template:
        params = _client_params(db, row.client_id)
        content = render_template_safe(transition.message_template, params)
        emit_automated_message(db, row.client_id, content, metadata={
            "workflow_action": row.next_action,
            "workflow_stage": next_stage,
        })
        push = {"title": render_title(transition.message_template, params), "body": content}

    db.add(WorkflowHistory(
        client_id=row.client_id,
        workflow_stage=next_stage,
        action=row.next_action,
        triggered_by=TriggerSource.SYSTEM.value,
        created_at=now,
    ))
    db.flush()
    return {"next_stage": next_stage, "next_action": next_action, "push": push}


def run_due_sweep(db: Session, now: Optional[datetime] = None) -> dict:
    """Advance every client whose scheduled next action is due.

    Returns:
        dict with success flag, processed count and per-client results
        ({client_id, status, action} or {client_id, status, error})
    """
    now = now or datetime.utcnow()
    logger.info("Starting workflow automation sweep...")

    due_rows = find_due_rows(db, now)
    logger.info(f"Found {len(due_rows)} workflows to process")

    results = []
    for row in due_rows:
        try:
            logger.info(f"Processing workflow for client {row.client_id}, action: {row.next_action}")
            outcome = _advance_due_row(db, row, now)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error processing workflow for client {row.client_id}: {e}")
            results.append({"client_id": row.client_id, "status": SweepStatus.ERROR.value, "error": str(e)})
            continue

        if outcome is None:
            logger.warning(f"Workflow for client {row.client_id} was claimed by another sweep — skipping")
            results.append({"client_id": row.client_id, "status": SweepStatus.SKIPPED.value, "action": row.next_action})
            continue

        if outcome["push"]:
            send_push_notification(row.client_id, outcome["push"]["title"], outcome["push"]["body"])

        results.append({"client_id": row.client_id, "status": SweepStatus.SUCCESS.value, "action": row.next_action})
        logger.info(f"Successfully processed workflow for client {row.client_id}")

    logger.info("Workflow automation sweep complete")
    return {
        "success": True,
        "processed": len(results),
        "results": results,
    }


def trigger_stage(
    db: Session,
    client_id: int,
    stage: str,
    triggered_by: str = TriggerSource.ADMIN.value,
    now: Optional[datetime] = None,
) -> dict:
    """Manually move a client into `stage` and schedule what follows it."""
    if not stage or not stage.strip():
        raise InvalidStage("stage is required")
    now = now or datetime.utcnow()
    logger.info(f"Manually triggering workflow stage for client {client_id}: {stage}")

    state = db.query(ClientWorkflowState).filter(ClientWorkflowState.client_id == client_id).first()
    if not state:
        raise WorkflowStateNotFound(client_id)

    transition = stage_transition(state.service_type, stage)
    next_action = None if transition.is_terminal else transition.next_action.value

    state.workflow_stage = stage
    state.stage_completed_at = now
    state.next_action = next_action
    state.next_action_due_at = transition.due_at(now)
    state.updated_at = now
    db.flush()

    db.add(WorkflowHistory(
        client_id=client_id,
        workflow_stage=stage,
        action=f"Manual trigger: {stage}",
        triggered_by=triggered_by or TriggerSource.ADMIN.value,
        created_at=now,
    ))
    db.commit()

    logger.info(f"Workflow stage triggered successfully for client {client_id}")
    return {
        "workflow_stage": stage,
        "next_action": next_action,
    }


def get_workflow_overview(db: Session, client_id: int) -> dict:
    """Current workflow row, its audit trail and the upcoming automatic chain."""
    state = db.query(ClientWorkflowState).filter(ClientWorkflowState.client_id == client_id).first()
    if not state:
        raise WorkflowStateNotFound(client_id)

    history = db.query(WorkflowHistory).filter(
        WorkflowHistory.client_id == client_id,
    ).order_by(WorkflowHistory.id.asc()).all()

    upcoming = describe_chain(state.service_type, state.next_action) if state.next_action else []

    return {
        "client_id": client_id,
        "service_type": state.service_type,
        "workflow_stage": state.workflow_stage,
        "stage_completed_at": state.stage_completed_at.isoformat() if state.stage_completed_at else None,
        "next_action": state.next_action,
        "next_action_due_at": state.next_action_due_at.isoformat() if state.next_action_due_at else None,
        "upcoming": upcoming,
        "history": [
            {
                "id": h.id,
                "workflow_stage": h.workflow_stage,
                "action": h.action,
                "triggered_by": h.triggered_by,
                "created_at": h.created_at.isoformat() if h.created_at else None,
            }
            for h in history
        ],
    }
