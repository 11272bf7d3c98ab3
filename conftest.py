import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api import deps  # noqa: E402
from app.core.db import Base  # noqa: E402
from app.core.roles import Role  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Role as RoleRow, User  # noqa: E402
from app.schemas.auth import Principal  # noqa: E402
from app.services.resource_storage import ResourceStorage  # noqa: E402

ADMIN_ID = 1
ALICE_ID = 2
BOB_ID = 3


class AuthState:
    """Caller seen by the API; replaces the identity provider in tests."""

    def __init__(self):
        self.principal = None

    def login(self, role: Role = Role.USER, user_id: int = ALICE_ID):
        self.principal = Principal(
            id=f"sb-{user_id}",
            email=f"user{user_id}@example.com",
            role=role,
            metadata={"role": role.value},
            user_id=user_id,
        )
        return self.principal

    def login_admin(self):
        return self.login(Role.CAPACITY_ADMIN, ADMIN_ID)

    def logout(self):
        self.principal = None


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    db.add_all([
        RoleRow(id=1, role_name="capacity_admin"),
        RoleRow(id=2, role_name="nsight_admin"),
        RoleRow(id=3, role_name="user"),
    ])
    db.add_all([
        User(id=ADMIN_ID, username="admin", email="admin@example.com", role_id=1),
        User(id=ALICE_ID, username="alice", email="alice@example.com", role_id=3),
        User(id=BOB_ID, username="bob", email="bob@example.com", role_id=3),
    ])
    db.commit()
    return {"admin": ADMIN_ID, "alice": ALICE_ID, "bob": BOB_ID}


@pytest.fixture
def storage(tmp_path):
    storage = ResourceStorage(tmp_path / "uploads")
    storage.ensure_dirs()
    return storage


@pytest.fixture
def auth():
    state = AuthState()
    state.login()
    return state


@pytest.fixture
def client(db, seed, storage, auth):
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_storage] = lambda: storage
    app.dependency_overrides[deps.get_optional_principal] = lambda: auth.principal
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
