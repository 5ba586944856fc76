from fastapi import APIRouter

from bto.api.v1.health import router as health_router
from bto.api.v1.audit import router as audit_router
from bto.api.v1.people import router as people_router
from bto.api.v1.projects import router as projects_router
from bto.api.v1.officer_registrations import router as officer_registrations_router
from bto.api.v1.applications import router as applications_router
from bto.api.v1.bookings import router as bookings_router
from bto.api.v1.enquiries import router as enquiries_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(audit_router, tags=["audit"])

# ------------------------------------------------------------------
# PEOPLE / PROJECTS
# ------------------------------------------------------------------
v1_router.include_router(people_router, tags=["people"])
v1_router.include_router(projects_router, tags=["projects"])
v1_router.include_router(officer_registrations_router, tags=["officers"])

# ------------------------------------------------------------------
# APPLICATIONS / BOOKINGS
# ------------------------------------------------------------------
v1_router.include_router(applications_router, tags=["applications"])
v1_router.include_router(bookings_router, tags=["bookings"])

# ------------------------------------------------------------------
# ENQUIRIES
# ------------------------------------------------------------------
v1_router.include_router(enquiries_router, tags=["enquiries"])
