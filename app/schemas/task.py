from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, List
from app.models.task import TaskStatus, TaskPriority

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: Optional[str] = Field(None, alias="assignedTo")

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, value):
        return value or None

    class Config:
        populate_by_name = True

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, value):
        return value or None

    @field_validator("title", "priority", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    class Config:
        populate_by_name = True

class TaskFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date_from: Optional[date] = None
    due_date_to: Optional[date] = None

class AssigneeResponse(BaseModel):
    id: str
    username: str
    email: str

    class Config:
        from_attributes = True

class CreatorResponse(BaseModel):
    id: str
    username: str

    class Config:
        from_attributes = True

class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = Field(None, serialization_alias="dueDate")
    priority: TaskPriority
    status: TaskStatus
    assignee: Optional[AssigneeResponse] = Field(None, serialization_alias="assignedTo")
    creator: Optional[CreatorResponse] = Field(None, serialization_alias="createdBy")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True

class TaskEnvelope(BaseModel):
    success: bool = True
    data: TaskResponse

class TaskListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[TaskResponse]

class DeletedEnvelope(BaseModel):
    success: bool = True
    data: dict = {}
