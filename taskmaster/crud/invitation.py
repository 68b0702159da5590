# taskmaster/crud/invitation.py
"""
Приглашения в команду.

Токен одноразовый и ограничен по времени. Для вызывающего отсутствующий,
истёкший и уже принятый токены неотличимы (InvalidInvitation). Принятие —
две записи (членство + accepted_at) в одной транзакции: либо обе, либо ни одной.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Tuple
import logging
import secrets

from sqlalchemy.orm import Session

from taskmaster.core import permissions
from taskmaster.core.constants import TeamRole
from taskmaster.core.exceptions import AlreadyMember, EmailMismatch, InvalidInvitation, ValidationError
from taskmaster.core.settings import settings
from taskmaster.crud.membership import get_membership, role_of, stage_member
from taskmaster.crud.user import normalize_email
from taskmaster.models.team import Team
from taskmaster.models.team_invitation import TeamInvitation
from taskmaster.models.team_member import TeamMember
from taskmaster.models.user import User

logger = logging.getLogger("TaskMaster.Invitations")

TOKEN_BYTES = 32

def invitation_ttl() -> timedelta:
    return timedelta(days=settings.INVITATION_EXPIRE_DAYS)

def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)

def create_invitation(db: Session, team: Team, email: str, role: str, invited_by: User) -> TeamInvitation:
    """
    Выпускает приглашение. Приглашать могут только owner/admin команды.
    Возвращённый token вызывающий доставляет сам (email-рассылка вне scope).
    """
    permissions.ensure_can_manage_team(role_of(db, team.id, invited_by.id), "Not authorized to invite")
    if role not in TeamRole.INVITABLE:
        raise ValidationError(
            f"Invalid invitation role: {role}",
            errors=[{"field": "role", "message": f"Role must be one of: {', '.join(TeamRole.INVITABLE)}"}],
        )
    invitation = TeamInvitation(
        team_id=team.id,
        email=normalize_email(email),
        role=role,
        token=generate_token(),
        invited_by_id=invited_by.id,
        expires_at=datetime.now(timezone.utc) + invitation_ttl(),
        accepted_at=None,
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    logger.info(f"User {invited_by.id} invited {invitation.email} to team {team.id} as {role}")
    return invitation

def resolve_invitation(db: Session, token: str) -> TeamInvitation:
    """
    Возвращает приглашение, пригодное к использованию, иначе InvalidInvitation.
    Срок действия проверяется лениво, в самом запросе.
    """
    now = datetime.now(timezone.utc)
    invitation = db.query(TeamInvitation).filter(
        TeamInvitation.token == token,
        TeamInvitation.expires_at > now,
        TeamInvitation.accepted_at.is_(None),
    ).first()
    if invitation is None:
        raise InvalidInvitation()
    return invitation

def consume_invitation(db: Session, invitation: TeamInvitation, user: User) -> TeamMember:
    """
    Атомарно: помечает приглашение принятым и создаёт членство.

    Условный UPDATE ... WHERE accepted_at IS NULL захватывает токен: если его
    уже принял параллельный запрос, rowcount == 0 -> InvalidInvitation.
    Вставка членства упирается в уникальный индекс -> AlreadyMember.
    В обоих случаях rollback отменяет обе записи.
    """
    now = datetime.now(timezone.utc)
    claimed = db.query(TeamInvitation).filter(
        TeamInvitation.id == invitation.id,
        TeamInvitation.accepted_at.is_(None),
        TeamInvitation.expires_at > now,
    ).update({TeamInvitation.accepted_at: now}, synchronize_session=False)
    if claimed != 1:
        db.rollback()
        logger.warning(f"Invitation {invitation.id} was consumed concurrently")
        raise InvalidInvitation()

    # stage_member делает rollback сам, в т.ч. для захвата токена выше
    member = stage_member(db, invitation.team_id, user.id, invitation.role)
    db.commit()
    db.refresh(invitation)
    logger.info(f"User {user.id} joined team {invitation.team_id} as {invitation.role} via invitation {invitation.id}")
    return member

def accept_invitation(db: Session, token: str, user: User) -> Tuple[TeamInvitation, TeamMember]:
    """
    Принять приглашение: токен валиден, email совпадает (строго), пользователь ещё не в команде.
    Возвращает (приглашение, новое членство).
    """
    invitation = resolve_invitation(db, token)
    # Сравнение строгое: email приглашения хранится в lower-case
    if invitation.email != user.email:
        logger.warning(f"User {user.id} tried to accept invitation {invitation.id} issued for another email")
        raise EmailMismatch()
    if get_membership(db, invitation.team_id, user.id) is not None:
        raise AlreadyMember()
    return invitation, consume_invitation(db, invitation, user)

def list_pending_invitations(db: Session, team: Team, requester: User) -> List[TeamInvitation]:
    """
    Непринятые и не истёкшие приглашения команды (только owner/admin).
    """
    permissions.ensure_can_manage_team(role_of(db, team.id, requester.id))
    now = datetime.now(timezone.utc)
    return db.query(TeamInvitation).filter(
        TeamInvitation.team_id == team.id,
        TeamInvitation.accepted_at.is_(None),
        TeamInvitation.expires_at > now,
    ).order_by(TeamInvitation.id.desc()).all()
