# taskmaster/crud/membership.py
"""
Реестр членства: (team, user) -> role.

Уникальный индекс (team_id, user_id) — авторитетная защита от гонок;
IntegrityError при вставке трактуется как ожидаемый исход AlreadyMember.
"""
from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskmaster.core.constants import TeamRole
from taskmaster.core.exceptions import AlreadyMember, MemberNotFound, ValidationError
from taskmaster.models.team_member import TeamMember

logger = logging.getLogger("TaskMaster.Membership")

def get_membership(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    return db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == user_id,
    ).first()

def role_of(db: Session, team_id: int, user_id: int) -> Optional[str]:
    """
    Роль пользователя в команде или None, если он не участник.
    """
    membership = get_membership(db, team_id, user_id)
    return membership.role if membership else None

def list_members(db: Session, team_id: int) -> List[TeamMember]:
    return db.query(TeamMember).filter(TeamMember.team_id == team_id).order_by(TeamMember.id).all()

def list_user_team_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(TeamMember.team_id).filter(TeamMember.user_id == user_id).all()
    return [row[0] for row in rows]

def stage_member(db: Session, team_id: int, user_id: int, role: str) -> TeamMember:
    """
    Добавляет строку членства в текущую транзакцию и делает flush (без commit).
    Нарушение уникальности -> rollback + AlreadyMember.
    """
    if role not in TeamRole.ALL:
        raise ValidationError(f"Invalid team role: {role}")
    member = TeamMember(team_id=team_id, user_id=user_id, role=role)
    db.add(member)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate membership for user {user_id} in team {team_id}")
        raise AlreadyMember()
    return member

def remove_member(db: Session, member: TeamMember) -> None:
    team_id, user_id = member.team_id, member.user_id
    db.delete(member)
    db.commit()
    logger.info(f"Removed user {user_id} from team {team_id}")

def leave_team(db: Session, team_id: int, user_id: int) -> None:
    """
    Удаляет собственное членство; если строки нет — MemberNotFound.
    """
    deleted = db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == user_id,
    ).delete(synchronize_session=False)
    if not deleted:
        db.rollback()
        raise MemberNotFound("Not a member of this team")
    db.commit()
    logger.info(f"User {user_id} left team {team_id}")
