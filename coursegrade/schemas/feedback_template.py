from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

TemplateCategory = Literal[
    "code_quality",
    "documentation",
    "testing",
    "implementation",
    "best_practices",
    "performance",
    "security",
    "ui_ux",
    "general",
]


class FeedbackTemplateCreate(BaseModel):
    name: str = Field(min_length=1)
    category: TemplateCategory
    content: str = Field(min_length=1)
    is_default: bool = False


class FeedbackTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[TemplateCategory] = None
    content: Optional[str] = Field(default=None, min_length=1)
    is_default: Optional[bool] = None


class FeedbackTemplateRead(BaseModel):
    id: int
    name: str
    category: str
    content: str
    is_default: bool
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
