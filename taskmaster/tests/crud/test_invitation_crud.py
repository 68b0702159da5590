#tests/crud/test_invitation_crud.py
import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session

from taskmaster.crud.invitation import (
    accept_invitation,
    consume_invitation,
    create_invitation,
    list_pending_invitations,
    resolve_invitation,
)
from taskmaster.crud.membership import role_of, stage_member
from taskmaster.crud.team import create_team
from taskmaster.core.exceptions import (
    AlreadyMember,
    EmailMismatch,
    ForbiddenError,
    InvalidInvitation,
    ValidationError,
)
from taskmaster.models.team import Team
from taskmaster.models.team_member import TeamMember
from taskmaster.models.user import User as UserModel


def _naive_utc_now() -> datetime:
    # SQLite возвращает naive datetime (UTC)
    return datetime.now(timezone.utc).replace(tzinfo=None)

def _expire(db: Session, invitation) -> None:
    invitation.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

@pytest.fixture
def team(db: Session, alice: UserModel) -> Team:
    return create_team(db, {"name": "Core", "description": "Core team"}, owner_id=alice.id)


def test_create_invitation_by_owner(db: Session, team: Team, alice: UserModel):
    invitation = create_invitation(db, team, "Bob@Example.com", "member", invited_by=alice)
    assert invitation.id is not None
    assert invitation.email == "bob@example.com"
    assert invitation.role == "member"
    assert invitation.invited_by_id == alice.id
    assert invitation.accepted_at is None
    assert len(invitation.token) >= 32
    expires = invitation.expires_at.replace(tzinfo=None)
    assert _naive_utc_now() + timedelta(days=6) < expires <= _naive_utc_now() + timedelta(days=7, minutes=1)

def test_tokens_are_unique(db: Session, team: Team, alice: UserModel):
    first = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    second = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    assert first.token != second.token

def test_create_invitation_requires_manager(db: Session, team: Team, bob: UserModel, carol: UserModel, join_team):
    with pytest.raises(ForbiddenError):
        create_invitation(db, team, "carol@example.com", "member", invited_by=bob)

    join_team(team, bob, "member")
    with pytest.raises(ForbiddenError):
        create_invitation(db, team, "carol@example.com", "member", invited_by=bob)

def test_team_admin_can_invite(db: Session, team: Team, bob: UserModel, join_team):
    join_team(team, bob, "admin")
    invitation = create_invitation(db, team, "carol@example.com", "admin", invited_by=bob)
    assert invitation.role == "admin"

def test_owner_role_cannot_be_granted_by_invitation(db: Session, team: Team, alice: UserModel):
    with pytest.raises(ValidationError):
        create_invitation(db, team, "bob@example.com", "owner", invited_by=alice)

def test_accept_invitation_creates_membership(db: Session, team: Team, alice: UserModel, bob: UserModel):
    invitation = create_invitation(db, team, "bob@example.com", "admin", invited_by=alice)
    accepted, member = accept_invitation(db, invitation.token, bob)

    assert accepted.id == invitation.id
    assert accepted.accepted_at is not None
    assert member.team_id == team.id
    assert member.user_id == bob.id
    assert role_of(db, team.id, bob.id) == "admin"

def test_invitation_is_single_use(db: Session, team: Team, alice: UserModel, bob: UserModel):
    invitation = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    accept_invitation(db, invitation.token, bob)
    with pytest.raises(InvalidInvitation):
        accept_invitation(db, invitation.token, bob)

def test_unknown_expired_and_used_tokens_look_the_same(db: Session, team: Team, alice: UserModel, bob: UserModel, carol: UserModel):
    used = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    accept_invitation(db, used.token, bob)
    expired = create_invitation(db, team, "carol@example.com", "member", invited_by=alice)
    _expire(db, expired)

    messages = []
    for token in ("no-such-token", expired.token, used.token):
        with pytest.raises(InvalidInvitation) as exc:
            accept_invitation(db, token, carol)
        messages.append((exc.value.status_code, exc.value.message))
    assert len(set(messages)) == 1
    assert messages[0] == (400, "Invalid or expired invitation")

def test_expired_invitation_is_not_resolved(db: Session, team: Team, alice: UserModel):
    invitation = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    assert resolve_invitation(db, invitation.token).id == invitation.id
    _expire(db, invitation)
    with pytest.raises(InvalidInvitation):
        resolve_invitation(db, invitation.token)

def test_email_mismatch_keeps_invitation_pending(db: Session, team: Team, alice: UserModel, carol: UserModel):
    invitation = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    with pytest.raises(EmailMismatch):
        accept_invitation(db, invitation.token, carol)

    db.refresh(invitation)
    assert invitation.accepted_at is None
    assert role_of(db, team.id, carol.id) is None

def test_already_member_is_rejected(db: Session, team: Team, alice: UserModel, bob: UserModel, join_team):
    join_team(team, bob, "member")
    invitation = create_invitation(db, team, "bob@example.com", "admin", invited_by=alice)
    with pytest.raises(AlreadyMember):
        accept_invitation(db, invitation.token, bob)

    db.refresh(invitation)
    assert invitation.accepted_at is None
    assert role_of(db, team.id, bob.id) == "member"

def test_consume_rolls_back_token_claim_on_duplicate_membership(db: Session, team: Team, alice: UserModel, bob: UserModel, join_team):
    """
    Членство появилось между проверкой и вставкой: захват токена тоже откатывается.
    """
    invitation = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    join_team(team, bob, "member")

    with pytest.raises(AlreadyMember):
        consume_invitation(db, invitation, bob)

    db.refresh(invitation)
    assert invitation.accepted_at is None
    assert db.query(TeamMember).filter(TeamMember.team_id == team.id, TeamMember.user_id == bob.id).count() == 1

def test_consume_of_already_claimed_invitation_adds_nobody(db: Session, team: Team, alice: UserModel, bob: UserModel, carol: UserModel):
    invitation = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    stale = resolve_invitation(db, invitation.token)
    consume_invitation(db, stale, bob)

    with pytest.raises(InvalidInvitation):
        consume_invitation(db, stale, carol)
    assert role_of(db, team.id, carol.id) is None
    assert db.query(TeamMember).filter(TeamMember.team_id == team.id).count() == 2

def test_list_pending_invitations(db: Session, team: Team, alice: UserModel, bob: UserModel):
    accepted = create_invitation(db, team, "bob@example.com", "member", invited_by=alice)
    accept_invitation(db, accepted.token, bob)
    expired = create_invitation(db, team, "dave@example.com", "member", invited_by=alice)
    _expire(db, expired)
    pending = create_invitation(db, team, "carol@example.com", "member", invited_by=alice)

    result = list_pending_invitations(db, team, alice)
    assert [i.id for i in result] == [pending.id]

    with pytest.raises(ForbiddenError):
        list_pending_invitations(db, team, bob)
