import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from typing import Any, Callable, Dict, Generator, List

# Env must be set BEFORE importing settings or the app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["OPENAI_API_KEY"] = ""
os.environ["DEBUG"] = "false"

# Registers every model in Base.metadata
import taskmaster.models
from taskmaster.models.base import Base

from taskmaster.main import app
from taskmaster.dependencies import get_db, get_session_factory
from taskmaster.crud.invitation import accept_invitation, create_invitation
from taskmaster.crud.user import create_user, get_user
from taskmaster.core import security
from taskmaster.core.constants import TeamRole, UserRole
from taskmaster.models.team import Team
from taskmaster.models.team_member import TeamMember
from taskmaster.models.user import User as UserModel
from taskmaster.realtime.rooms import RoomManager
from taskmaster.services.file_storage import LocalFileStorage

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

TEST_PASSWORD = "password123"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Свежая схема на каждый тест: CRUD-функции сами делают commit/rollback,
    поэтому внешняя транзакция для изоляции не подходит.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def rooms(monkeypatch) -> RoomManager:
    manager = RoomManager()
    monkeypatch.setattr(app.state, "rooms", manager)
    return manager


@pytest.fixture(scope="function")
def storage(tmp_path, monkeypatch) -> LocalFileStorage:
    file_storage = LocalFileStorage(
        root=str(tmp_path / "uploads"),
        max_size=1024,
        allowed_types=["text/plain", "application/pdf", "image/png"],
    )
    monkeypatch.setattr(app.state, "file_storage", file_storage)
    return file_storage


@pytest.fixture(scope="function")
def client(db: Session, rooms: RoomManager, storage: LocalFileStorage) -> Generator[TestClient, None, None]:
    """
    TestClient с подменённой сессией БД.
    """
    def override_get_db():
        yield db

    def override_get_session_factory():
        return TestingSessionLocal

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db: Session, email: str, first_name: str = "Test", last_name: str = "User", role: str = UserRole.USER) -> UserModel:
    return create_user(db, {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "password": TEST_PASSWORD,
        "role": role,
    })


def auth_headers(user: UserModel) -> Dict[str, str]:
    token, _ = security.create_user_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(db: Session) -> UserModel:
    return make_user(db, "alice@example.com", "Alice", "Anders")

@pytest.fixture
def bob(db: Session) -> UserModel:
    return make_user(db, "bob@example.com", "Bob", "Brown")

@pytest.fixture
def carol(db: Session) -> UserModel:
    return make_user(db, "carol@example.com", "Carol", "Clark")

@pytest.fixture
def admin_user(db: Session) -> UserModel:
    return make_user(db, "admin@example.com", "Admin", "User", role=UserRole.ADMIN)

@pytest.fixture
def alice_headers(alice: UserModel) -> Dict[str, str]:
    return auth_headers(alice)

@pytest.fixture
def bob_headers(bob: UserModel) -> Dict[str, str]:
    return auth_headers(bob)

@pytest.fixture
def carol_headers(carol: UserModel) -> Dict[str, str]:
    return auth_headers(carol)

@pytest.fixture
def admin_headers(admin_user: UserModel) -> Dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def join_team(db: Session) -> Callable[..., TeamMember]:
    """
    Добавляет пользователя в команду так же, как это делает API:
    приглашение от владельца и его принятие.
    """
    def _join(team: Team, user: UserModel, role: str = TeamRole.MEMBER) -> TeamMember:
        owner = get_user(db, team.owner_id)
        invitation = create_invitation(db, team, user.email, role, invited_by=owner)
        return accept_invitation(db, invitation.token, user)[1]
    return _join


class RecordingConnection:
    """Соединение-заглушка: запоминает всё, что ему отправили."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        self.messages: List[Dict[str, Any]] = []

    def send(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    def events(self, name: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m["event"] == name]


class FailingConnection(RecordingConnection):
    def send(self, message: Dict[str, Any]) -> None:
        raise RuntimeError("socket is gone")


@pytest.fixture
def make_connection() -> Callable[..., RecordingConnection]:
    def _make(user_id: int, failing: bool = False) -> RecordingConnection:
        return FailingConnection(user_id) if failing else RecordingConnection(user_id)
    return _make


@pytest.fixture
def subscribe(rooms: RoomManager) -> Callable[..., RecordingConnection]:
    """
    subscribe(user_id, "task:1", ...) -> подключённое записывающее соединение.
    """
    def _subscribe(user_id: int, *room_names: str) -> RecordingConnection:
        conn = RecordingConnection(user_id)
        rooms.connect(conn, user_id)
        for room in room_names:
            rooms.join(conn, room)
        return conn
    return _subscribe
