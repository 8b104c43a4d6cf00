"""
Notification Service
Best-effort in-app notifications emitted after a lifecycle transition commits.
A failure here is logged and rolled back on its own; it never undoes the
transition that triggered it.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.notification import Notification, NotificationStatus, NotificationType
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


# ── Message builders ──────────────────────────────────────────────────────────

def _person(user: Optional[User], fallback: str) -> str:
    if not user:
        return fallback
    return f"{user.first_name or ''} {user.last_name or ''}".strip() or user.email


def lease_message(lease, action: str) -> str:
    nickname = lease.lease_nickname or "Unnamed lease"
    tenant_name = _person(lease.tenant, lease.tenant_name or "Unknown tenant")
    unit_label = lease.unit.label if lease.unit else "Unknown unit"

    if action == "CREATED":
        return f"New lease created: {nickname} for {tenant_name} in {unit_label}"
    if action == "UPDATED":
        return f"Lease updated: {nickname} for {tenant_name}"
    if action == "EXPIRED":
        return f"Lease expired: {nickname} for {tenant_name}"
    return f"Lease {action.lower()}: {nickname}"


def payment_message(payment) -> str:
    tenant_first = "tenant"
    if payment.lease and payment.lease.tenant:
        tenant_first = payment.lease.tenant.first_name or tenant_first

    amount = f"{payment.amount:,.2f}"
    if payment.status == "PAID":
        if payment.timing_status == "ONTIME":
            return f"Payment of {amount} received on time from {tenant_first}"
        if payment.timing_status == "LATE":
            return f"Late payment of {amount} received from {tenant_first}"
        return f"Payment of {amount} received from {tenant_first}"
    return f"Payment of {amount} is pending from {tenant_first}"


# ── NotificationService ───────────────────────────────────────────────────────

class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify(self, user_id: uuid.UUID, type: NotificationType, message: str) -> bool:
        """Persist one notification. Returns False instead of raising."""
        try:
            self.db.add(Notification(user_id=user_id, type=type, message=message))
            self.db.commit()
            return True
        except Exception as e:
            self.db.rollback()
            logger.warning(f"[notify] Failed to notify user {user_id} ({type}): {e}")
            return False

    def notify_admins(self, type: NotificationType, message: str) -> int:
        """Fan a notification out to every admin; returns how many were stored."""
        try:
            admin_ids = [
                row[0]
                for row in self.db.query(User.id).filter(User.role == UserRole.ADMIN).all()
            ]
        except Exception as e:
            self.db.rollback()
            logger.warning(f"[notify] Could not load admins: {e}")
            return 0

        sent = sum(1 for admin_id in admin_ids if self.notify(admin_id, type, message))
        if sent:
            logger.info(f"[notify] Notified {sent} admins ({type})")
        return sent

    # ── Read side ────────────────────────────────────────────────────────────

    def list_for_user(self, user_id: uuid.UUID, unread_only: bool = False) -> List[Notification]:
        q = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            q = q.filter(Notification.status == NotificationStatus.UNREAD)
        return q.order_by(Notification.created_at.desc()).all()

    def mark_read(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")
        notification.status = NotificationStatus.READ
        self.db.commit()
        self.db.refresh(notification)
        return notification
