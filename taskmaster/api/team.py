#taskmaster/api/team.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from taskmaster.core import permissions
from taskmaster.core.exceptions import MemberNotFound
from taskmaster.core.pagination import PageParams, get_page_params
from taskmaster.crud.invitation import accept_invitation, create_invitation, list_pending_invitations
from taskmaster.crud.membership import get_membership, leave_team, list_members, remove_member, role_of
from taskmaster.crud.team import (
    create_team,
    delete_team,
    get_team,
    get_team_tasks,
    get_user_teams,
    update_team,
)
from taskmaster.dependencies import get_current_active_user, get_db, get_rooms
from taskmaster.models.user import User as UserModel
from taskmaster.realtime import events
from taskmaster.realtime.rooms import RoomManager
from taskmaster.schemas.response import MessageResponse
from taskmaster.schemas.task import TaskList
from taskmaster.schemas.team import (
    InvitationList,
    InviteRequest,
    InviteResponse,
    TeamCreate,
    TeamDetail,
    TeamList,
    TeamResponse,
    TeamUpdate,
)
from taskmaster.services import notifications

router = APIRouter(prefix="/teams", tags=["Teams"])

@router.post("/", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team_api(
    data: TeamCreate,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Создать новую команду (текущий пользователь становится владельцем).
    """
    team = create_team(db, data.model_dump(), owner_id=user.id)
    return {"message": "Team created", "team": team}

@router.get("/", response_model=TeamList)
def list_my_teams(
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Активные команды, в которых состоит текущий пользователь.
    """
    teams, total = get_user_teams(db, user.id, skip=page.skip, limit=page.limit)
    return {"teams": teams, "pagination": page.meta(total)}

@router.post("/join/{token}", response_model=TeamResponse)
def join_team(
    token: str,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Принять приглашение по токену. Невалидный/истёкший/использованный токен -> 400.
    """
    invitation, member = accept_invitation(db, token, user)
    team = get_team(db, member.team_id)
    events.member_joined(rooms, team.id, user, member.role)
    notifications.notify_team_joined(db, rooms, team, user, inviter_id=invitation.invited_by_id)
    return {"message": "Joined team successfully", "team": team}

@router.get("/{team_id}", response_model=TeamDetail)
def read_team(
    team_id: int,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Команда, её участники и роль текущего пользователя (только для участников).
    """
    team = get_team(db, team_id)
    role = role_of(db, team.id, user.id)
    permissions.ensure_member(role)
    return {"team": team, "members": list_members(db, team.id), "user_role": role}

@router.put("/{team_id}", response_model=TeamResponse)
def update_team_api(
    team_id: int,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Обновить команду. Только owner/admin.
    """
    team = get_team(db, team_id)
    permissions.ensure_can_manage_team(role_of(db, team.id, user.id))
    team = update_team(db, team, data.model_dump(exclude_unset=True))
    return {"message": "Team updated", "team": team}

@router.delete("/{team_id}", response_model=MessageResponse)
def delete_team_api(
    team_id: int,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Удалить команду вместе с членствами и приглашениями. Только владелец.
    """
    team = get_team(db, team_id)
    permissions.ensure_team_owner(team, user.id)
    delete_team(db, team)
    return MessageResponse(message="Team deleted")

@router.post("/{team_id}/invite", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def invite_member(
    team_id: int,
    data: InviteRequest,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Пригласить пользователя по email. Токен возвращается в ответе, доставку выполняет клиент.
    """
    team = get_team(db, team_id)
    invitation = create_invitation(db, team, data.email, data.role, invited_by=user)
    return InviteResponse(invite_token=invitation.token, expires_at=invitation.expires_at)

@router.get("/{team_id}/invitations", response_model=InvitationList)
def pending_invitations(
    team_id: int,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    team = get_team(db, team_id)
    return {"invitations": list_pending_invitations(db, team, user)}

@router.delete("/{team_id}/members/{member_id}", response_model=MessageResponse)
def remove_team_member(
    team_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Удалить участника (member_id это ID пользователя). Только owner/admin; владельца удалить нельзя.
    """
    team = get_team(db, team_id)
    permissions.ensure_can_manage_team(role_of(db, team.id, user.id))
    member = get_membership(db, team.id, member_id)
    if member is None:
        raise MemberNotFound()
    permissions.ensure_can_remove_member(member.role)
    remove_member(db, member)
    events.member_removed(rooms, team.id, member_id)
    notifications.notify_removed_from_team(db, rooms, team, member_id, actor_id=user.id)
    return MessageResponse(message="Member removed")

@router.post("/{team_id}/leave", response_model=MessageResponse)
def leave(
    team_id: int,
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
    rooms: RoomManager = Depends(get_rooms),
):
    """
    Покинуть команду. Владелец выйти не может.
    """
    team = get_team(db, team_id)
    permissions.ensure_can_leave(team, user.id)
    leave_team(db, team.id, user.id)
    events.member_removed(rooms, team.id, user.id)
    return MessageResponse(message="Left team successfully")

@router.get("/{team_id}/tasks", response_model=TaskList)
def team_tasks(
    team_id: int,
    task_status: Optional[str] = Query(None, alias="status"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_current_active_user),
):
    """
    Задачи команды (только для участников).
    """
    team = get_team(db, team_id)
    permissions.ensure_member(role_of(db, team.id, user.id))
    tasks, total = get_team_tasks(db, team.id, status=task_status, skip=page.skip, limit=page.limit)
    return {"tasks": tasks, "pagination": page.meta(total)}
