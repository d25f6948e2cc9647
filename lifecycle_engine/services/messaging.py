"""
Automated in-app messages written on behalf of the engine.

Both the workflow sweep and the card finalizer address clients through
this one envelope: sender_type=system, message_type=automated, unread.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from lifecycle_engine.domain.enums import MessageType, SenderType
from lifecycle_engine.models import Message

logger = logging.getLogger(__name__)


def emit_automated_message(
    db: Session,
    client_id: int,
    content: str,
    metadata: Optional[dict] = None,
) -> Message:
    """Stage an automated message for the client (caller commits)."""
    message = Message(
        client_id=client_id,
        sender_id=None,
        sender_type=SenderType.SYSTEM.value,
        message_type=MessageType.AUTOMATED.value,
        content=content,
        extra=metadata,
        is_read=False,
    )
    db.add(message)
    db.flush()
    logger.info(f"Automated message {message.id} queued for client {client_id}")
    return message
