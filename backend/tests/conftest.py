import os
import tempfile
from collections.abc import Callable, Generator
from uuid import UUID, uuid4

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="friendlink-logs-"))
os.environ.setdefault("SECRET_KEY", "friendlink-test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.db import init_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402

from .fixtures.factories import *  # noqa: E402,F403


@pytest.fixture(scope="function")
def db_engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        settings.SQLALCHEMY_DATABASE_URI_TEST,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine: Engine) -> Generator[Session, None, None]:
    with Session(db_engine) as session:
        yield session


@pytest.fixture(scope="function")
def session_factory(db_engine: Engine) -> Callable[[], Session]:
    return lambda: Session(db_engine)


@pytest.fixture(scope="function")
def client(db_engine: Engine) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def account_factory() -> Callable[[], UUID]:
    return uuid4


@pytest.fixture
def auth_headers() -> Callable[[UUID], dict[str, str]]:
    def _auth_headers(account_id: UUID) -> dict[str, str]:
        token = create_access_token(account_id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
