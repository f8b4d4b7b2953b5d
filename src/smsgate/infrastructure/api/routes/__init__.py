"""API Routes for smsgate."""

from smsgate.infrastructure.api.routes.admin_router import router as admin_router
from smsgate.infrastructure.api.routes.auth_router import router as auth_router
from smsgate.infrastructure.api.routes.invites_router import router as invites_router

__all__ = [
    "admin_router",
    "auth_router",
    "invites_router",
]
