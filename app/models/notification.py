from datetime import datetime
from enum import Enum
from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, utcnow


class NotificationType(str, Enum):
    LISTING_REQUEST = "LISTING_REQUEST"
    LISTING = "LISTING"
    LEASE = "LEASE"
    PAYMENT = "PAYMENT"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    APPLICATION = "APPLICATION"


class NotificationStatus(str, Enum):
    UNREAD = "UNREAD"
    READ = "READ"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[NotificationType] = mapped_column(SQLEnum(NotificationType), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[NotificationStatus] = mapped_column(
        SQLEnum(NotificationStatus), default=NotificationStatus.UNREAD, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="notifications")
