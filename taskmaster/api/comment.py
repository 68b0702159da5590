#taskmaster/api/comment.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskmaster.core.pagination import PageParams, get_page_params
from taskmaster.crud.comment import create_comment, delete_comment, get_comment, get_task_comments, update_comment
from taskmaster.crud.task import get_visible_task
from taskmaster.dependencies import get_current_active_user, get_db, get_rooms
from taskmaster.models.user import User as UserModel
from taskmaster.realtime import events
from taskmaster.realtime.rooms import RoomManager
from taskmaster.schemas.comment import CommentCreate, CommentList, CommentRead, CommentResponse, CommentThread, CommentUpdate
from taskmaster.schemas.response import MessageResponse
from taskmaster.services import notifications

router = APIRouter(prefix="/comments", tags=["Comments"])

@router.post("/tasks/{task_id}", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Комментарий к задаче. Видят все подписчики task:<id>; автор и исполнитель получают уведомление.
    """
    task = get_visible_task(db, task_id, current_user)
    comment = create_comment(db, task, current_user.id, data.content, parent_id=data.parent_id)
    events.comment_created(rooms, comment)
    notifications.notify_task_commented(db, rooms, task, comment, author_id=current_user.id)
    return {"message": "Comment added", "comment": comment}

@router.get("/tasks/{task_id}", response_model=CommentList)
def list_comments(
    task_id: int,
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """
    Корневые комментарии задачи с ответами (удалённые не показываются).
    """
    task = get_visible_task(db, task_id, current_user)
    comments, replies, total = get_task_comments(db, task.id, skip=page.skip, limit=page.limit)
    threads = [
        CommentThread(
            **CommentRead.model_validate(c).model_dump(),
            replies=[CommentRead.model_validate(r) for r in replies.get(c.id, [])],
        )
        for c in comments
    ]
    return {"comments": threads, "pagination": page.meta(total)}

@router.put("/{comment_id}", response_model=CommentResponse)
def edit_comment(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    comment = update_comment(db, get_comment(db, comment_id), current_user.id, data.content)
    events.comment_updated(rooms, comment)
    return {"message": "Comment updated", "comment": comment}

@router.delete("/{comment_id}", response_model=MessageResponse)
def remove_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Soft-delete комментария (только автор).
    """
    comment = delete_comment(db, get_comment(db, comment_id), current_user.id)
    events.comment_deleted(rooms, comment)
    return MessageResponse(message="Comment deleted")
