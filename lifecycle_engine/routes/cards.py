"""
Pending review card routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lifecycle_engine.database import get_db
from lifecycle_engine.routes.deps import get_admin_identity
from lifecycle_engine.schemas import FinalizeCardRequest, FinalizeCardResponse
from lifecycle_engine.services.card_finalizer import finalize_card

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["Cards"])


@router.post("/send", response_model=FinalizeCardResponse)
def send_card_to_client(
    data: FinalizeCardRequest,
    db: Session = Depends(get_db),
    admin_id: Optional[str] = Depends(get_admin_identity),
):
    """Release a reviewed card to its client."""
    try:
        result = finalize_card(db, data.card_id, data.display_name, reviewed_by=admin_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error in send-card-to-client: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, **result}
