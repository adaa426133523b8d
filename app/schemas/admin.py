from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class SystemSettingsOut(BaseModel):
    auto_approve_suggestions: bool
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    model_config = {
        'from_attributes': True
    }


class SystemSettingsUpdate(BaseModel):
    auto_approve_suggestions: bool
