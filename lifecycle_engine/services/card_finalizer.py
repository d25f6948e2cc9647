"""
Card finalizer: releases a reviewed card to its client.

Steps, each committed on its own:
  1. load the card and its client
  2. mark the card sent (timestamp + reviewer)
  3. send the "card ready" automated message
  4. move the client's workflow to the card's own workflow_stage
  5. store an assessment snapshot embedding the generated content

A failure stops the sequence and propagates. Steps already committed stay
committed; there is no compensation.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from lifecycle_engine.domain.enums import AssessmentType, CardStatus, CardType, TriggerSource
from lifecycle_engine.domain.message_templates import CARD_READY, render_template_safe, render_title
from lifecycle_engine.models import (
    Assessment, Client, ClientWorkflowState, PendingReviewCard, WorkflowHistory,
)
from lifecycle_engine.services.errors import CardNotFound, ClientNotFound
from lifecycle_engine.services.messaging import emit_automated_message
from lifecycle_engine.services.push_service import send_push_notification

logger = logging.getLogger(__name__)

CARD_TYPE_NAMES = {
    CardType.HEALTH_ASSESSMENT: "Health Assessment Card",
    CardType.STRESS_CARD: "Stress Assessment Card",
    CardType.SLEEP_CARD: "Sleep Quality Card",
    CardType.ACTION_PLAN: "Health Action Plan",
    CardType.DIET_PLAN: "Diet Plan",
}
DEFAULT_CARD_TYPE_NAME = "Assessment Card"


def card_type_name(card_type: str) -> str:
    return CARD_TYPE_NAMES.get(card_type, DEFAULT_CARD_TYPE_NAME)


def assessment_type_for(card_type: str) -> AssessmentType:
    if "health" in card_type:
        return AssessmentType.HEALTH
    if "stress" in card_type:
        return AssessmentType.STRESS
    if "sleep" in card_type:
        return AssessmentType.SLEEP
    return AssessmentType.CUSTOM


def fallback_display_name(type_name: str, now: datetime) -> str:
    """e.g. 'Sleep Quality Card - 3/7/2025'"""
    return f"{type_name} - {now.month}/{now.day}/{now.year}"


def _mark_sent(db: Session, card: PendingReviewCard, reviewed_by: Optional[str], now: datetime) -> None:
    card.status = CardStatus.SENT.value
    card.sent_at = now
    card.reviewed_at = now
    card.reviewed_by = reviewed_by
    db.commit()


def _send_card_message(db: Session, card: PendingReviewCard, type_name: str) -> dict:
    params = {"card_type_name": type_name, "card_type_name_lower": type_name.lower()}
    content = render_template_safe(CARD_READY.name, params)
    emit_automated_message(db, card.client_id, content, metadata={
        "card_id": card.id,
        "card_type": card.card_type,
    })
    db.commit()
    return {"title": render_title(CARD_READY.name, params), "body": content}


def _sync_workflow_stage(db: Session, card: PendingReviewCard, reviewed_by: Optional[str], now: datetime) -> None:
    state = db.query(ClientWorkflowState).filter(ClientWorkflowState.client_id == card.client_id).first()
    if not state:
        logger.warning(f"Client {card.client_id} has no workflow state — stage '{card.workflow_stage}' not applied")
        return

    state.workflow_stage = card.workflow_stage
    state.stage_completed_at = now
    state.updated_at = now
    db.add(WorkflowHistory(
        client_id=card.client_id,
        workflow_stage=card.workflow_stage,
        action=f"Card sent: {card.card_type}",
        triggered_by=reviewed_by or TriggerSource.ADMIN.value,
        created_at=now,
    ))
    db.commit()


def _record_assessment(
    db: Session,
    card: PendingReviewCard,
    type_name: str,
    display_name: Optional[str],
    now: datetime,
) -> Assessment:
    name = display_name or fallback_display_name(type_name, now)
    assessment = Assessment(
        client_id=card.client_id,
        assessment_type=assessment_type_for(card.card_type).value,
        display_name=name,
        file_name=name,
        ai_generated=True,
        assessment_data={
            "card_id": card.id,
            "card_type": card.card_type,
            "generated_content": card.generated_content,
            "sent_at": now.isoformat(),
        },
    )
    db.add(assessment)
    db.commit()
    return assessment


def finalize_card(
    db: Session,
    card_id: int,
    display_name: Optional[str] = None,
    reviewed_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Send a reviewed card to its client.

    Args:
        db: Database session
        card_id: Pending review card to release
        display_name: Name for the assessment record (default: generated)
        reviewed_by: Admin identity recorded on the card
        now: Send time (default: utcnow)

    Returns:
        dict with a human-readable message, e.g. "Diet Plan sent to Asha"
    """
    now = now or datetime.utcnow()
    logger.info(f"Sending card {card_id} to client with display name: {display_name}")

    card = db.query(PendingReviewCard).filter(PendingReviewCard.id == card_id).first()
    if not card:
        raise CardNotFound(card_id)
    client = db.query(Client).filter(Client.id == card.client_id).first()
    if not client:
        raise ClientNotFound(card.client_id)
    client_name = client.name

    type_name = card_type_name(card.card_type)

    step = "mark card sent"
    try:
        _mark_sent(db, card, reviewed_by, now)

        step = "send card message"
        push = _send_card_message(db, card, type_name)
        send_push_notification(card.client_id, push["title"], push["body"])

        step = "update workflow stage"
        _sync_workflow_stage(db, card, reviewed_by, now)

        step = "create assessment record"
        _record_assessment(db, card, type_name, display_name, now)
    except Exception as e:
        db.rollback()
        logger.error(f"Card {card_id} failed at step '{step}': {e}")
        raise

    logger.info(f"Card {card_id} sent to client successfully")
    return {"message": f"{type_name} sent to {client_name}"}
