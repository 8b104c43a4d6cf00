# Import all models in dependency order so relationship strings resolve
from app.models.user import User, UserRole
from app.models.property import Property, Unit, UnitStatus
from app.models.listing import Listing, ListingStatus, ListingDecision, RiskLevel
from app.models.lease import Lease, LeaseStatus, LeaseInterval, LeaseType
from app.models.payment import Payment, PaymentStatus, TimingStatus, PaymentMethod
from app.models.application import TenantScreening
from app.models.notification import Notification, NotificationType, NotificationStatus

__all__ = [
    "User",
    "UserRole",
    "Property",
    "Unit",
    "UnitStatus",
    "Listing",
    "ListingStatus",
    "ListingDecision",
    "RiskLevel",
    "Lease",
    "LeaseStatus",
    "LeaseInterval",
    "LeaseType",
    "Payment",
    "PaymentStatus",
    "TimingStatus",
    "PaymentMethod",
    "TenantScreening",
    "Notification",
    "NotificationType",
    "NotificationStatus",
]
