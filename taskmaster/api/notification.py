#taskmaster/api/notification.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskmaster.core.pagination import PageParams, get_page_params
from taskmaster.crud.notification import delete_notification, get_notifications, mark_all_as_read, mark_as_read
from taskmaster.dependencies import get_current_active_user, get_db
from taskmaster.models.user import User as UserModel
from taskmaster.schemas.notification import NotificationList
from taskmaster.schemas.response import MessageResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("/", response_model=NotificationList)
def list_notifications(
    unread: bool = Query(False, description="Только непрочитанные"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    items, total, unread_count = get_notifications(
        db, current_user.id, unread_only=unread, skip=page.skip, limit=page.limit,
    )
    return {"notifications": items, "unread_count": unread_count, "pagination": page.meta(total)}

@router.put("/read-all", response_model=MessageResponse)
def read_all(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    mark_all_as_read(db, current_user.id)
    return MessageResponse(message="All notifications marked as read")

@router.put("/{notification_id}/read", response_model=MessageResponse)
def read_one(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    mark_as_read(db, notification_id, current_user.id)
    return MessageResponse(message="Notification marked as read")

@router.delete("/{notification_id}", response_model=MessageResponse)
def remove_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    delete_notification(db, notification_id, current_user.id)
    return MessageResponse(message="Notification deleted")
