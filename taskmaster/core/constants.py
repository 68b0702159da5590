# taskmaster/core/constants.py
"""
Строковые значения ролей, статусов и типов, которые хранятся в БД как есть.
"""


class UserRole:
    USER = "user"
    ADMIN = "admin"
    ALL = (USER, ADMIN)


class TeamRole:
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    ALL = (OWNER, ADMIN, MEMBER)
    MANAGERS = (OWNER, ADMIN)
    INVITABLE = (ADMIN, MEMBER)


class TaskStatus:
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"
    ALL = (OPEN, IN_PROGRESS, REVIEW, COMPLETED)


class TaskPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    ALL = (LOW, MEDIUM, HIGH, URGENT)


class NotificationType:
    TASK_ASSIGNED = "task_assigned"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    TASK_COMMENTED = "task_commented"
    TASK_DUE_SOON = "task_due_soon"
    TASK_OVERDUE = "task_overdue"
    TEAM_INVITE = "team_invite"
    TEAM_JOINED = "team_joined"
    TEAM_REMOVED = "team_removed"
    MENTION = "mention"
    SYSTEM = "system"
    ALL = (
        TASK_ASSIGNED, TASK_UPDATED, TASK_COMPLETED, TASK_COMMENTED,
        TASK_DUE_SOON, TASK_OVERDUE, TEAM_INVITE, TEAM_JOINED,
        TEAM_REMOVED, MENTION, SYSTEM,
    )


class ResourceType:
    TASK = "task"
    TEAM = "team"
    COMMENT = "comment"


# Сортировка задач: разрешённые поля
TASK_SORT_FIELDS = ("created_at", "updated_at", "due_date", "priority", "title", "status")
