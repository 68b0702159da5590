# taskmaster/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from taskmaster.core.settings import settings

# SQLite нужен check_same_thread=False: sync-хендлеры FastAPI работают в threadpool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


def init_db() -> None:
    """Создаёт таблицы для всех моделей (dev / sqlite; в проде миграции)."""
    import taskmaster.models  # noqa: F401  регистрирует модели в Base.metadata
    from taskmaster.models.base import Base

    Base.metadata.create_all(bind=engine)
