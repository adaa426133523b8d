import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.models.profile import Profile
from app.models.testimonial import Testimonial
from app.schemas.testimonial import TestimonialCreate, TestimonialOut
from app.services import audit
from app.services.auth import require_staff
from app.services.data_client import DataClient, get_service_client, get_user_client

logger = logging.getLogger("app.testimonials")

router = APIRouter(prefix="/api/testimonials", tags=["Testimonials"])

PUBLIC_CACHE = "public, s-maxage=300, stale-while-revalidate=86400"
DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@router.get("", response_model=List[TestimonialOut])
def list_testimonials(
    response: Response,
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    client: DataClient = Depends(get_service_client),
):
    """Active testimonials for the landing page."""
    limit = min(limit, MAX_LIMIT)
    try:
        rows = (
            client.query(Testimonial)
            .filter(Testimonial.is_active.is_(True))
            .order_by(Testimonial.display_order.asc(), Testimonial.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load testimonials: {e}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Failed to load testimonials"},
            headers={"Cache-Control": PUBLIC_CACHE},
        )
    response.headers["Cache-Control"] = PUBLIC_CACHE
    return rows


@router.post("", response_model=TestimonialOut, status_code=201)
def create_testimonial(
    payload: TestimonialCreate,
    current_user: Profile = Depends(require_staff),
    client: DataClient = Depends(get_user_client),
):
    testimonial = Testimonial(
        name=payload.name.strip(),
        profession=payload.profession,
        testimonial=payload.testimonial.strip(),
        image_url=str(payload.image_url) if payload.image_url else None,
        linkedin_url=str(payload.linkedin_url) if payload.linkedin_url else None,
        display_order=payload.display_order,
        is_active=payload.is_active,
    )
    client.add(testimonial)
    audit.log_testimonial_create(current_user.id, testimonial.id)
    return testimonial
