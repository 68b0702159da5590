# taskmaster/core/exceptions.py
from typing import Any, Dict, List, Optional


class BaseAppException(Exception):
    """Базовый класс для всех кастомных исключений приложения."""
    status_code: int = 500

    def __init__(self, message: str = "App exception", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

# ==== Валидация ====

class ValidationError(BaseAppException):
    """Общая ошибка валидации (400). Может нести ошибки по полям."""
    status_code = 400

    def __init__(self, message: str = "Validation error", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

class ConflictError(BaseAppException):
    """Нарушение уникальности на уровне хранилища: '<field> already exists'."""
    status_code = 400

    def __init__(self, field: str):
        super().__init__(f"{field} already exists")
        self.field = field

# ==== NotFound ====

class NotFoundError(BaseAppException):
    """Ошибка отсутствия ресурса."""
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)

class UserNotFound(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message)

class TeamNotFound(NotFoundError):
    def __init__(self, message: str = "Team not found"):
        super().__init__(message)

class MemberNotFound(NotFoundError):
    def __init__(self, message: str = "Member not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class CommentNotFound(NotFoundError):
    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)

class AttachmentNotFound(NotFoundError):
    def __init__(self, message: str = "Attachment not found"):
        super().__init__(message)

class NotificationNotFound(NotFoundError):
    def __init__(self, message: str = "Notification not found"):
        super().__init__(message)

# ==== Авторизация ====

class ForbiddenError(BaseAppException):
    """Предикат авторизации не выполнен (403)."""
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)

# ==== Teams ====

class InvalidInvitation(BaseAppException):
    """
    Токен приглашения отсутствует, истёк или уже использован.
    Сообщение одинаковое для всех трёх случаев.
    """
    status_code = 400
    MESSAGE = "Invalid or expired invitation"

    def __init__(self):
        super().__init__(self.MESSAGE)

class EmailMismatch(BaseAppException):
    status_code = 400

    def __init__(self, message: str = "Invitation is for a different email"):
        super().__init__(message)

class AlreadyMember(BaseAppException):
    status_code = 400

    def __init__(self, message: str = "Already a member of this team"):
        super().__init__(message)

class OwnerActionError(BaseAppException):
    """Действие недопустимо для владельца команды (удаление, выход)."""
    status_code = 400

    def __init__(self, message: str = "Cannot remove team owner"):
        super().__init__(message)

# ==== AI ====

class AIServiceError(BaseAppException):
    """Ошибка внешнего AI-провайдера."""
    status_code = 502

    def __init__(self, message: str = "AI service error", status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)

class AINotConfigured(AIServiceError):
    """AI-клиент не сконфигурирован (нет API-ключа)."""
    def __init__(self, message: str = "AI assistant is not configured"):
        super().__init__(message, status_code=400)
