"""Task polling and error-report endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.auth import verify_api_key
from api.dependencies import get_error_handler, get_task_manager
from services import ErrorHandler
from services.models import TaskStatus, TaskStatusResponse
from services.task_manager import TaskManager

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: str,
    tm: TaskManager = Depends(get_task_manager),
):
    """Poll async task status. Returns the result when completed."""
    task = tm.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")

    return TaskStatusResponse(
        task_id=task["task_id"],
        status=TaskStatus(task["status"]),
        result=task["result"],
        error=task["error"],
        created_at=task["created_at"],
        completed_at=task["completed_at"],
    )


@router.get("/tasks")
async def list_tasks(
    limit: int = Query(20, ge=1, le=100),
    tm: TaskManager = Depends(get_task_manager),
):
    return tm.get_tasks(limit=limit)


@router.get("/errors")
async def error_stats(handler: ErrorHandler = Depends(get_error_handler)):
    """Counts of recent errors by severity and code."""
    return handler.get_error_stats()


@router.delete("/errors", status_code=204)
async def clear_errors(handler: ErrorHandler = Depends(get_error_handler)):
    handler.clear_errors()
