"""
API v1 router. Aggregates every v1 endpoint module.
"""
from fastapi import APIRouter

from complaint_desk.api.v1 import admin, chat, complaints

router = APIRouter(
    responses={
        401: {"description": "Missing user header"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Business rule violation"},
        422: {"description": "Validation Error"},
        502: {"description": "Backend unavailable"},
    }
)

router.include_router(complaints.router)
router.include_router(chat.router)
router.include_router(admin.router)
