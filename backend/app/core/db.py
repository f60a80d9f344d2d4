from collections.abc import Generator

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def init_db(bind: Engine) -> None:
    # Tables are created by alembic in deployed environments; this is used
    # for local sqlite databases and the test suite.
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(bind)
