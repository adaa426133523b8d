from pydantic import BaseModel, Field
from typing import Literal


class SuggestionNotificationData(BaseModel):
    author_name: str
    content: str
    agenda_title: str = "Unknown Agenda"


class EmailRequest(BaseModel):
    type: Literal["suggestion"]
    data: SuggestionNotificationData = Field(...)
