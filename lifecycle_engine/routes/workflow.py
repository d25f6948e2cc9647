"""
Workflow routes.

POST /workflow/process-due is called by an external periodic trigger (cron)
with no body. POST /workflow/trigger-stage is the admin's manual override.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lifecycle_engine.database import get_db
from lifecycle_engine.domain.enums import TriggerSource
from lifecycle_engine.routes.deps import get_admin_identity
from lifecycle_engine.schemas import (
    SweepResponse, TriggerStageRequest, TriggerStageResponse, WorkflowOverviewResponse,
)
from lifecycle_engine.services.workflow_scheduler import (
    run_due_sweep, trigger_stage, get_workflow_overview,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["Workflow"])


@router.api_route("/process-due", methods=["GET", "POST"], response_model=SweepResponse)
def process_due_workflows(db: Session = Depends(get_db)):
    """Advance every client whose next workflow action is due.

    GET is accepted because cron schedulers invoke with GET.
    """
    try:
        return run_due_sweep(db)
    except Exception as e:
        # Only the initial due-row query can land here; row failures are per-client results
        logger.error(f"Error in workflow sweep: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/trigger-stage", response_model=TriggerStageResponse)
def trigger_workflow_stage(
    data: TriggerStageRequest,
    db: Session = Depends(get_db),
    admin_id: Optional[str] = Depends(get_admin_identity),
):
    """Manually move a client into a workflow stage."""
    try:
        result = trigger_stage(db, data.client_id, data.stage, triggered_by=admin_id or TriggerSource.ADMIN.value)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in trigger-workflow-stage: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, **result}


@router.get("/{client_id}", response_model=WorkflowOverviewResponse)
def workflow_overview(client_id: int, db: Session = Depends(get_db)):
    """Workflow state, history and upcoming automatic steps for a client."""
    try:
        return get_workflow_overview(db, client_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
