#taskmaster/api/attachment.py
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging

from taskmaster.core.exceptions import AttachmentNotFound, ForbiddenError
from taskmaster.crud.attachment import (
    check_targets,
    create_attachment,
    delete_attachment,
    get_attachment,
    get_attachment_task_id,
    get_task_attachments,
)
from taskmaster.crud.comment import get_comment
from taskmaster.crud.task import get_visible_task
from taskmaster.dependencies import get_current_active_user, get_db, get_file_storage
from taskmaster.models.user import User as UserModel
from taskmaster.schemas.attachment import AttachmentList, AttachmentResponse
from taskmaster.schemas.response import MessageResponse
from taskmaster.services.file_storage import LocalFileStorage

logger = logging.getLogger("TaskMaster.AttachmentsAPI")

router = APIRouter(prefix="/attachments", tags=["Attachments"])

@router.post("/", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
def upload_attachment(
    file: UploadFile = File(...),
    task_id: Optional[int] = Form(None),
    comment_id: Optional[int] = Form(None),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Загрузить файл и привязать к задаче и/или комментарию.
    Если привязка не удалась, сохранённый файл удаляется.
    """
    storage.check_type(file.content_type)
    check_targets(db, task_id, comment_id)
    filename, path, size = storage.save(file.file, file.filename or "file")
    try:
        if task_id is not None:
            get_visible_task(db, task_id, current_user)
        if comment_id is not None:
            get_visible_task(db, get_comment(db, comment_id).task_id, current_user)
        attachment = create_attachment(db, {
            "filename": filename,
            "original_name": file.filename or filename,
            "mime_type": file.content_type,
            "size": size,
            "path": path,
            "task_id": task_id,
            "comment_id": comment_id,
            "uploaded_by_id": current_user.id,
        })
    except Exception:
        db.rollback()
        storage.delete(path)
        logger.warning(f"Upload of {file.filename} by user {current_user.id} rejected, stored file removed")
        raise
    return {"message": "File uploaded", "attachment": attachment}

@router.get("/tasks/{task_id}", response_model=AttachmentList)
def list_task_attachments(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    task = get_visible_task(db, task_id, current_user)
    return {"attachments": get_task_attachments(db, task.id)}

@router.get("/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Скачать файл под исходным именем.
    """
    attachment = get_attachment(db, attachment_id)
    task_id = get_attachment_task_id(db, attachment)
    if task_id is not None:
        get_visible_task(db, task_id, current_user)
    elif attachment.uploaded_by_id != current_user.id:
        raise ForbiddenError("Not authorized to download this file")
    if not storage.exists(attachment.path):
        logger.error(f"File for attachment {attachment.id} is missing at {attachment.path}")
        raise AttachmentNotFound("File not found")
    return FileResponse(attachment.path, filename=attachment.original_name, media_type=attachment.mime_type)

@router.delete("/{attachment_id}", response_model=MessageResponse)
def remove_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Удалить вложение (только загрузивший) вместе с файлом.
    """
    path = delete_attachment(db, get_attachment(db, attachment_id), current_user.id)
    storage.delete(path)
    return MessageResponse(message="Attachment deleted")
