# taskmaster/crud/notification.py
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from taskmaster.core.constants import NotificationType
from taskmaster.core.exceptions import NotificationNotFound, ValidationError
from taskmaster.models.notification import Notification

logger = logging.getLogger("TaskMaster.Notifications")

def create_notification(
    db: Session,
    recipient_id: int,
    type: str,
    title: str,
    message: str,
    sender_id: Optional[int] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[int] = None,
) -> Notification:
    if type not in NotificationType.ALL:
        raise ValidationError(f"Unknown notification type: {type}")
    notification = Notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        title=title,
        message=message,
        resource_type=resource_type,
        resource_id=resource_id,
        is_read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification

def get_notifications(
    db: Session,
    recipient_id: int,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Notification], int, int]:
    """
    Уведомления получателя, новые сверху. Возвращает (страница, всего, непрочитанных).
    """
    base = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    query = base.filter(Notification.is_read.is_(False)) if unread_only else base
    total = query.count()
    unread_count = base.filter(Notification.is_read.is_(False)).count()
    items = query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(skip).limit(limit).all()
    return items, total, unread_count

def get_own_notification(db: Session, notification_id: int, recipient_id: int) -> Notification:
    # Чужое уведомление неотличимо от отсутствующего
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == recipient_id,
    ).first()
    if not notification:
        raise NotificationNotFound()
    return notification

def mark_as_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    notification = get_own_notification(db, notification_id, recipient_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(notification)
    return notification

def mark_all_as_read(db: Session, recipient_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == recipient_id,
        Notification.is_read.is_(False),
    ).update({Notification.is_read: True, Notification.read_at: datetime.now(timezone.utc)}, synchronize_session=False)
    db.commit()
    logger.info(f"Marked {updated} notifications as read for user {recipient_id}")
    return updated

def delete_notification(db: Session, notification_id: int, recipient_id: int) -> None:
    notification = get_own_notification(db, notification_id, recipient_id)
    db.delete(notification)
    db.commit()
    logger.info(f"Notification {notification_id} deleted by user {recipient_id}")
