from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..runners import WorkflowManager
from ..schemas import (
    WorkflowOut,
    WorkflowRecord,
    WorkflowRequest,
    WorkflowStats,
    WorkflowStatus,
    is_workflow_complete,
    workflow_progress_message,
)
from .deps import get_workflow_manager

router = APIRouter(prefix="/workflows", tags=["workflows"])


class WorkflowCreated(BaseModel):
    id: str
    status: WorkflowStatus


class CancelOut(BaseModel):
    cancelled: bool


@router.post("", response_model=WorkflowCreated)
async def start_workflow(body: WorkflowRequest, manager: WorkflowManager = Depends(get_workflow_manager)):
    workflow_id = manager.start_workflow(body)
    record = manager.get_workflow_status(workflow_id)
    return WorkflowCreated(id=workflow_id, status=record.status)


@router.get("", response_model=List[WorkflowRecord])
async def list_workflows(user_id: Optional[str] = Query(None, alias="userId"),
                         manager: WorkflowManager = Depends(get_workflow_manager)):
    return manager.list_workflows(user_id)


@router.get("/stats", response_model=WorkflowStats)
async def workflow_stats(manager: WorkflowManager = Depends(get_workflow_manager)):
    return manager.get_stats()


@router.get("/{workflow_id}", response_model=WorkflowOut)
async def get_workflow(workflow_id: str, manager: WorkflowManager = Depends(get_workflow_manager)):
    record = manager.get_workflow_status(workflow_id)
    if not record:
        raise HTTPException(404, "workflow not found")
    return WorkflowOut(
        **record.model_dump(),
        message=workflow_progress_message(record.progress),
        complete=is_workflow_complete(record.status.value),
    )


@router.post("/{workflow_id}/cancel", response_model=CancelOut)
async def cancel_workflow(workflow_id: str, manager: WorkflowManager = Depends(get_workflow_manager)):
    return CancelOut(cancelled=manager.cancel_workflow(workflow_id))
