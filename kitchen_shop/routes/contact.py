"""
Contact form endpoint.

Saves the enquiry and forwards it to the sales inbox (when configured).
Rate limited per client IP.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..config import get_rate_limit_contact
from ..db import get_db
from ..schemas.orders import ContactSubmissionRequest, ContactSubmissionResponse
from ..services.order import save_contact_submission
from .orders import limiter

logger = logging.getLogger(__name__)

contact_router = APIRouter(tags=["Contact"])


@contact_router.post("/contact", response_model=ContactSubmissionResponse)
@limiter.limit(get_rate_limit_contact)
def submit_contact_form(
    request: Request,
    body: ContactSubmissionRequest,
    db: Session = Depends(get_db),
) -> ContactSubmissionResponse:
    save_contact_submission(db, body)
    return ContactSubmissionResponse(
        success=True,
        message="Thank you for your inquiry. We will get back to you within 24 hours.",
    )
