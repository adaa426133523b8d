from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class AgendaOut(BaseModel):
    id: str
    sequence_id: Optional[int] = None
    title: str
    description: str
    problem_statement: Optional[str] = None
    problem_statement_long: Optional[str] = None
    category: str
    priority: str
    timeline: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        'from_attributes': True
    }

    @field_validator('key_points', mode='before')
    def key_points_list(cls, v):
        return v or []


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class AgendaPage(BaseModel):
    data: List[AgendaOut]
    pagination: Pagination
