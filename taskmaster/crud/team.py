# taskmaster/crud/team.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from taskmaster.core.constants import TeamRole
from taskmaster.core.exceptions import TeamNotFound, ValidationError
from taskmaster.crud.membership import stage_member
from taskmaster.models.task import Task
from taskmaster.models.team import Team
from taskmaster.models.team_invitation import TeamInvitation
from taskmaster.models.team_member import TeamMember

logger = logging.getLogger("TaskMaster.Teams")

def create_team(db: Session, data: dict, owner_id: int) -> Team:
    """
    Создать команду и членство владельца (role=owner) в одной транзакции.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Team name is required", errors=[{"field": "name", "message": "Team name is required"}])
    team = Team(
        name=name,
        description=(data.get("description") or "").strip(),
        avatar=data.get("avatar"),
        owner_id=owner_id,
    )
    db.add(team)
    try:
        db.flush()
        stage_member(db, team.id, owner_id, TeamRole.OWNER)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating team '{name}': {e}")
        raise
    db.refresh(team)
    logger.info(f"Created team '{team.name}' (ID: {team.id}) owned by user {owner_id}")
    return team

def get_team(db: Session, team_id: int) -> Team:
    """
    Получить команду по ID или TeamNotFound.
    """
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise TeamNotFound()
    return team

def get_user_teams(db: Session, user_id: int, skip: int = 0, limit: int = 20) -> Tuple[List[Team], int]:
    """
    Активные команды, в которых состоит пользователь.
    """
    query = (
        db.query(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .filter(TeamMember.user_id == user_id, Team.is_active.is_(True))
    )
    total = query.count()
    teams = query.order_by(Team.created_at.desc(), Team.id.desc()).offset(skip).limit(limit).all()
    return teams, total

def update_team(db: Session, team: Team, data: dict) -> Team:
    """
    Обновить название/описание/аватар команды. None-поля игнорируются.
    """
    if data.get("name") is not None:
        new_name = data["name"].strip()
        if not new_name:
            raise ValidationError("Team name cannot be empty", errors=[{"field": "name", "message": "Team name cannot be empty"}])
        team.name = new_name
    if data.get("description") is not None:
        team.description = data["description"].strip()
    if data.get("avatar") is not None:
        team.avatar = data["avatar"]
    team.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(team)
    logger.info(f"Updated team '{team.name}' (ID: {team.id})")
    return team

def delete_team(db: Session, team: Team) -> None:
    """
    Hard-delete команды вместе с участниками и приглашениями; задачи отвязываются.
    """
    team_id = team.id
    try:
        db.query(TeamMember).filter(TeamMember.team_id == team_id).delete(synchronize_session=False)
        db.query(TeamInvitation).filter(TeamInvitation.team_id == team_id).delete(synchronize_session=False)
        db.query(Task).filter(Task.team_id == team_id).update({Task.team_id: None}, synchronize_session=False)
        db.expire(team)
        db.delete(team)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete team {team_id}: {e}")
        raise
    logger.info(f"Deleted team {team_id}")

def get_team_tasks(
    db: Session,
    team_id: int,
    status: Optional[str] = None,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Task], int]:
    query = db.query(Task).filter(Task.team_id == team_id, Task.is_archived.is_(False))
    if status:
        query = query.filter(Task.status == status)
    total = query.count()
    tasks = query.order_by(Task.created_at.desc(), Task.id.desc()).offset(skip).limit(limit).all()
    return tasks, total
