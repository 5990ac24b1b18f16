from app.models.user import User, UserRole
from app.models.task import (
    Task,
    TaskStatus,
    TaskPriority,
)

__all__ = [
    "User",
    "UserRole",
    "Task",
    "TaskStatus",
    "TaskPriority",
]
