import logging
from typing import Any, List

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import (
    InternalError, NotFoundError, ValidationError, describe_validation_errors
)
from app.db.base import is_valid_id
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, TaskFilters
from app.schemas.user import Actor
from app.services import access_policy

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, db: Session):
        self.db = db

    def create_task(self, task_data: TaskCreate, actor: Actor) -> Task:
        self._check_assignee(task_data.assigned_to)

        task = Task(
            title=task_data.title,
            description=task_data.description,
            due_date=task_data.due_date,
            priority=task_data.priority,
            assigned_to=task_data.assigned_to,
            created_by=actor.id,
        )
        self.db.add(task)
        self._commit()
        self.db.refresh(task)

        logger.info("task %s created by %s", task.id, actor.id)
        return task

    def list_tasks(self, filters: TaskFilters, actor: Actor) -> List[Task]:
        query = self.db.query(Task).options(
            joinedload(Task.assignee),
            joinedload(Task.creator),
        )

        predicate = access_policy.task_query_predicate(self.db, actor, filters)
        if predicate is not None:
            query = query.filter(predicate)

        try:
            return query.order_by(Task.created_at.desc(), Task.id).all()
        except SQLAlchemyError as exc:
            logger.exception("task query failed for %s", actor.id)
            raise InternalError(str(exc)) from exc

    def get_task(self, task_id: str, actor: Actor) -> Task:
        task = self._get_or_404(task_id)
        access_policy.authorize_view(actor, task)
        return task

    def update_task(self, task_id: str, changes: Any, actor: Actor) -> Task:
        """Apply a partial update.

        ``changes`` is the raw request body: existence and permission are
        checked before any of it is validated, and unknown keys (including
        ``createdBy``) are dropped.
        """
        task = self._get_or_404(task_id)
        access_policy.authorize_modify(actor, task)

        if not isinstance(changes, dict):
            raise ValidationError("Request body must be a JSON object")

        assigned_to = changes.get("assignedTo", changes.get("assigned_to"))
        if assigned_to and not is_valid_id(assigned_to):
            raise ValidationError("Invalid assignedTo ID")

        try:
            update = TaskUpdate.model_validate(changes)
        except pydantic.ValidationError as exc:
            raise ValidationError(describe_validation_errors(exc.errors())) from exc

        fields = update.model_dump(exclude_unset=True)
        if fields.get("assigned_to"):
            self._check_assignee(fields["assigned_to"])

        for field, value in fields.items():
            setattr(task, field, value)

        self._commit()
        self.db.refresh(task)

        logger.info("task %s updated by %s: %s", task.id, actor.id, sorted(fields))
        return task

    def delete_task(self, task_id: str, actor: Actor) -> None:
        task = self._get_or_404(task_id)
        access_policy.authorize_modify(actor, task)

        self.db.delete(task)
        self._commit()

        logger.info("task %s deleted by %s", task_id, actor.id)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("task store write failed")
            raise InternalError(str(exc)) from exc

    def _get_or_404(self, task_id: str) -> Task:
        task = None
        if is_valid_id(task_id):
            task = (
                self.db.query(Task)
                .options(joinedload(Task.assignee), joinedload(Task.creator))
                .filter(Task.id == task_id)
                .first()
            )
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def _check_assignee(self, user_id) -> None:
        if user_id is None:
            return
        if not is_valid_id(user_id):
            raise ValidationError("Invalid assignedTo ID")
        if self.db.get(User, user_id) is None:
            raise ValidationError("Assigned user not found")
