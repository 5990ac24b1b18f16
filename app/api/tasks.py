from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_actor
from app.db.base import get_db
from app.models.task import TaskPriority, TaskStatus
from app.schemas.task import (
    DeletedEnvelope, TaskCreate, TaskEnvelope, TaskFilters, TaskListEnvelope
)
from app.schemas.user import Actor
from app.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    task = TaskService(db).create_task(task_data, actor)
    return {"success": True, "data": task}

@router.get("", response_model=TaskListEnvelope)
def list_tasks(
    search: Optional[str] = Query(None, description="Search in title or description"),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    due_date_from: Optional[date] = Query(None, alias="dueDateFrom"),
    due_date_to: Optional[date] = Query(None, alias="dueDateTo"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    filters = TaskFilters(
        search=search,
        status=task_status,
        priority=priority,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
    )
    tasks = TaskService(db).list_tasks(filters, actor)
    return {"success": True, "count": len(tasks), "data": tasks}

@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    task = TaskService(db).get_task(task_id, actor)
    return {"success": True, "data": task}

@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: str,
    changes: Any = Body(...),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    # Body stays raw here: existence and permission are checked before validation
    task = TaskService(db).update_task(task_id, changes, actor)
    return {"success": True, "data": task}

@router.delete("/{task_id}", response_model=DeletedEnvelope)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    TaskService(db).delete_task(task_id, actor)
    return {"success": True, "data": {}}
