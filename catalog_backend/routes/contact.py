"""
Contact form route.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from catalog_backend.dependencies import get_mailer
from catalog_backend.mailer import ContactMailer
from catalog_backend.schemas import ContactRequest, ContactResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactResponse)
async def send_contact_message(
    payload: ContactRequest, mailer: ContactMailer = Depends(get_mailer)
):
    if not await mailer.send_contact(payload.model_dump()):
        logger.error("Contact message from %s was not delivered", payload.email)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to send email"},
        )
    return ContactResponse(success=True, message="Message sent successfully!")
