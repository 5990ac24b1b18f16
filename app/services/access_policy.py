"""Role-based visibility and permission rules for tasks.

List queries are narrowed with a scoping predicate built from SQLAlchemy
clause objects; single-task reads and writes are allowed or denied against
the loaded row. Only the ``user`` role is ownership-checked on single tasks.
Admins and managers pass those checks outright, so a manager can fetch any
task individually even though their list is limited to their own and their
team's work.
"""
import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import AuthorizationError
from app.db.base import casefold
from app.models.task import Task
from app.models.user import User, UserRole
from app.schemas.task import TaskFilters
from app.schemas.user import Actor

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def team_member_ids(db: Session, team: str) -> List[str]:
    """Ids of every user whose team equals ``team``."""
    rows = db.query(User.id).filter(User.team == team).all()
    return [row.id for row in rows]


def visibility_clause(db: Session, actor: Actor) -> Optional[ColumnElement]:
    """Scoping predicate for list queries; None means no restriction."""
    if actor.role == UserRole.ADMIN:
        return None

    clauses = [Task.created_by == actor.id, Task.assigned_to == actor.id]

    if actor.role == UserRole.MANAGER and actor.team:
        members = team_member_ids(db, actor.team)
        if members:
            clauses.append(Task.assigned_to.in_(members))

    return or_(*clauses)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` only ever matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def filter_clauses(filters: TaskFilters) -> List[ColumnElement]:
    conditions = []

    if filters.search:
        pattern = f"%{escape_like(filters.search.casefold())}%"
        conditions.append(
            or_(
                casefold(Task.title).like(pattern, escape=LIKE_ESCAPE),
                casefold(Task.description).like(pattern, escape=LIKE_ESCAPE),
            )
        )

    if filters.status:
        conditions.append(Task.status == filters.status)

    if filters.priority:
        conditions.append(Task.priority == filters.priority)

    if filters.due_date_from:
        conditions.append(Task.due_date >= filters.due_date_from)

    if filters.due_date_to:
        conditions.append(Task.due_date <= filters.due_date_to)

    return conditions


def task_query_predicate(db: Session, actor: Actor, filters: TaskFilters) -> Optional[ColumnElement]:
    """Role scope ANDed with the caller's filters; None when nothing applies."""
    conditions = filter_clauses(filters)
    scope = visibility_clause(db, actor)
    if scope is not None:
        conditions.insert(0, scope)
    if not conditions:
        return None
    return and_(*conditions)


def can_view(actor: Actor, task: Task) -> bool:
    if actor.role != UserRole.USER:
        return True
    return actor.id in (task.created_by, task.assigned_to)


def can_modify(actor: Actor, task: Task) -> bool:
    if actor.role != UserRole.USER:
        return True
    return task.created_by == actor.id


def authorize_view(actor: Actor, task: Task) -> None:
    if not can_view(actor, task):
        logger.warning("user %s denied read of task %s", actor.id, task.id)
        raise AuthorizationError()


def authorize_modify(actor: Actor, task: Task) -> None:
    if not can_modify(actor, task):
        logger.warning("user %s denied write to task %s", actor.id, task.id)
        raise AuthorizationError()
