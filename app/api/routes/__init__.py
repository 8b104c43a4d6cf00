from app.api.routes.listings import router as listings_router
from app.api.routes.admin import router as admin_router
from app.api.routes.leases import router as leases_router
from app.api.routes.applications import router as applications_router
from app.api.routes.payments import router as payments_router
from app.api.routes.tenant import router as tenant_router
from app.api.routes.notifications import router as notifications_router

__all__ = [
    "listings_router",
    "admin_router",
    "leases_router",
    "applications_router",
    "payments_router",
    "tenant_router",
    "notifications_router",
]
