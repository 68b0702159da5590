#tests/crud/test_notification_crud.py
import pytest
from sqlalchemy.orm import Session

from taskmaster.core.exceptions import NotificationNotFound, ValidationError
from taskmaster.crud.notification import (
    create_notification,
    delete_notification,
    get_notifications,
    mark_all_as_read,
    mark_as_read,
)
from taskmaster.models.user import User as UserModel


def _notify(db: Session, recipient: UserModel, title: str = "Hello", type: str = "system"):
    return create_notification(db, recipient_id=recipient.id, type=type, title=title, message=f"{title} message")


def test_unknown_type_is_rejected(db: Session, alice: UserModel):
    with pytest.raises(ValidationError):
        _notify(db, alice, type="carrier_pigeon")

def test_listing_and_unread_count(db: Session, alice: UserModel, bob: UserModel):
    first = _notify(db, alice, "first")
    second = _notify(db, alice, "second")
    _notify(db, bob, "bob's")

    items, total, unread = get_notifications(db, alice.id)
    assert total == 2 and unread == 2
    assert [n.id for n in items] == [second.id, first.id]

    mark_as_read(db, first.id, alice.id)
    items, total, unread = get_notifications(db, alice.id, unread_only=True)
    assert total == 1 and unread == 1
    assert [n.id for n in items] == [second.id]

def test_mark_as_read_sets_read_at(db: Session, alice: UserModel):
    notification = mark_as_read(db, _notify(db, alice).id, alice.id)
    assert notification.is_read is True
    assert notification.read_at is not None

def test_foreign_notification_is_not_found(db: Session, alice: UserModel, bob: UserModel):
    notification = _notify(db, alice)
    with pytest.raises(NotificationNotFound):
        mark_as_read(db, notification.id, bob.id)
    with pytest.raises(NotificationNotFound):
        delete_notification(db, notification.id, bob.id)

def test_mark_all_and_delete(db: Session, alice: UserModel, bob: UserModel):
    _notify(db, alice)
    _notify(db, alice)
    doomed = _notify(db, alice)
    _notify(db, bob)

    assert mark_all_as_read(db, alice.id) == 3
    assert mark_all_as_read(db, alice.id) == 0
    _, _, bob_unread = get_notifications(db, bob.id)
    assert bob_unread == 1

    delete_notification(db, doomed.id, alice.id)
    _, total, _ = get_notifications(db, alice.id)
    assert total == 2
