from fastapi import APIRouter

from .features.admin_override.router import router as admin_override_router
from .features.archive.router import router as archive_router
from .features.create_guest.router import router as create_guest_router
from .features.identity_link.router import router as identity_link_router
from .features.search.router import router as search_router
from .features.send_reminder.router import router as send_reminder_router
from .features.submit_response.router import router as submit_response_router

router = APIRouter(tags=["guests"])

# Fixed paths (/guests/register, /guests/archive, /guests/reminders, /guests/me)
# go in before the routers that match /guests/{guest_id}
router.include_router(create_guest_router)
router.include_router(archive_router)
router.include_router(send_reminder_router)
router.include_router(search_router)
router.include_router(submit_response_router)
router.include_router(admin_override_router)
router.include_router(identity_link_router)
