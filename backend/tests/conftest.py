import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.middleware.auth_middleware import ALGORITHM
from app.models.user import User
from app.models.team import Team, TeamMember
from app.models.project import Project
from app.services.notification_sink import get_notification_sink

TEST_DB_URL = "sqlite:///./test_team_tasks.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class RecordingSink:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


class FailingSink:
    def publish(self, event):
        raise RuntimeError("push channel closed")


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def sink():
    recording = RecordingSink()
    app.dependency_overrides[get_notification_sink] = lambda: recording
    yield recording
    app.dependency_overrides.pop(get_notification_sink, None)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "root": User(email="root@company.com", first_name="Root", last_name="Admin", role="superadmin"),
        "admin": User(email="admin@company.com", first_name="Alice", last_name="Admin", role="admin"),
        "admin2": User(email="admin2@company.com", first_name="Brian", last_name="Boss", role="admin"),
        "member": User(email="mina.kim@company.com", first_name="Mina", last_name="Kim", role="member"),
        "member2": User(email="jun.park@company.com", first_name="Jun", last_name="Park", role="member"),
        "outsider": User(email="out@company.com", first_name="Olly", last_name="Out", role="member"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_team(db, seed_users):
    team = Team(name="플랫폼팀", created_by=seed_users["admin"].user_id)
    team.members = [
        TeamMember(user_id=seed_users["admin"].user_id, role="admin"),
        TeamMember(user_id=seed_users["member"].user_id, role="member"),
        TeamMember(user_id=seed_users["member2"].user_id, role="member"),
    ]
    db.add(team)
    db.commit()
    db.refresh(team)
    return team


@pytest.fixture
def seed_project(db, seed_team, seed_users):
    project = Project(name="고객 포털", created_by=seed_users["admin"].user_id)
    project.teams = [seed_team]
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def make_token(user_id: int) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY, algorithm=ALGORITHM)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {make_token(user.user_id)}"}
