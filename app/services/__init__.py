from app.services.notification_service import NotificationService
from app.services.listing_service import ListingService
from app.services.lease_service import LeaseService
from app.services.payment_service import PaymentService
from app.services.application_service import ApplicationService

__all__ = [
    "NotificationService",
    "ListingService",
    "LeaseService",
    "PaymentService",
    "ApplicationService",
]
