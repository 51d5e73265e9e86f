import os
import tempfile

# Settings and the engine are created at import time, so point them at SQLite first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_INIT_MODE"] = "off"
os.environ["RUN_EMBEDDED_TOKEN_SWEEPER"] = "false"
os.environ["SEED_RBAC_DEFAULTS"] = "false"
os.environ["LOG_FILE"] = os.path.join(tempfile.gettempdir(), "scaffold-api-tests", "app.log")
os.environ["LOGIN_RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["LOGIN_RATE_LIMIT_PER_HOUR"] = "10000"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scaffold_api.core.database import Base
from scaffold_api.core.security import get_password_hash
from scaffold_api.models.user import User
from scaffold_api.services.rbac_service import rbac_service


def _make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session_factory():
    return _make_session_factory()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    rbac_service.seed_defaults(db)
    return db


@pytest.fixture
def make_user(db):
    def _make(email="user@example.com", password="Secret123!", roles=(), is_active=True, **fields):
        user = User(
            email=email,
            password_hash=get_password_hash(password) if password else None,
            is_active=is_active,
            auth_provider=fields.pop("auth_provider", "password" if password else None),
            **fields,
        )
        user.roles = [rbac_service.find_role_by_name(db, name) for name in roles]
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make
