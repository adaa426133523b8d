from pydantic import BaseModel, AnyHttpUrl, Field
from typing import Optional
from datetime import datetime


class TestimonialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    profession: Optional[str] = Field(None, max_length=200)
    testimonial: str = Field(..., min_length=1)
    image_url: Optional[AnyHttpUrl] = None
    linkedin_url: Optional[AnyHttpUrl] = None
    display_order: int = 0
    is_active: bool = True


class TestimonialOut(BaseModel):
    id: str
    name: str
    profession: Optional[str]
    testimonial: str
    image_url: Optional[str]
    linkedin_url: Optional[str]
    display_order: int
    created_at: Optional[datetime]

    model_config = {
        'from_attributes': True
    }
