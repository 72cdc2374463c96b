import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("JWT_ISSUER", "beproductive-test")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import make_access_token
from app.db.base import Base, import_models
from app.db.session import get_db
from app.main import app
from app.models.user import User


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, email="ada@example.com", sub="google-ada", name="Ada") -> User:
    user = User(email=email, google_sub=sub, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(client: TestClient, user: User) -> TestClient:
    client.cookies.set("access_token", make_access_token(str(user.id)))
    return client


@pytest.fixture()
def user(db):
    return make_user(db)


@pytest.fixture()
def other_user(db):
    return make_user(db, email="bob@example.com", sub="google-bob", name="Bob")


@pytest.fixture()
def auth_client(client, user):
    return login(client, user)
