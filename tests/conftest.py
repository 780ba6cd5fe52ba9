import os

TEST_DB_FILE = "test_coursegrade.db"
os.environ["COURSEGRADE_DATABASE_URL"] = f"sqlite:///./{TEST_DB_FILE}"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from coursegrade.core.deps import get_db  # noqa: E402
from coursegrade.core.security import hash_password  # noqa: E402
from coursegrade.db.base import Base  # noqa: E402
from coursegrade.db.session import SessionLocal, engine  # noqa: E402
from coursegrade.main import app  # noqa: E402
from coursegrade.models.group import FinalGroup, FinalGroupMember  # noqa: E402
from coursegrade.models.profile import Profile  # noqa: E402
from coursegrade.services import tasks  # noqa: E402

PASSWORD = "password123"
# hashing is slow; every seeded user shares one hash
PASSWORD_HASH = hash_password(PASSWORD)

TestingSessionLocal = SessionLocal


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed():
    """Seed an admin, four students and one group of three for each test.

    Returns a dict of ids: admin, student1..student4, group.
    student4 is not in the group.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()

        admin = Profile(
            email="admin@example.com",
            full_name="Admin One",
            role="admin",
            hashed_password=PASSWORD_HASH,
        )
        students = [
            Profile(
                email=f"student{i}@example.com",
                full_name=f"Student {i}",
                role="student",
                hashed_password=PASSWORD_HASH,
            )
            for i in range(1, 5)
        ]
        db.add_all([admin, *students])
        db.commit()

        group = FinalGroup(name="Team Alpha", description="Final project team")
        db.add(group)
        db.commit()

        db.add_all(
            [
                FinalGroupMember(group_id=group.id, user_id=students[0].id, role="owner"),
                FinalGroupMember(group_id=group.id, user_id=students[1].id, role="member"),
                FinalGroupMember(group_id=group.id, user_id=students[2].id, role="member"),
            ]
        )
        db.commit()

        ids = {"admin": admin.id, "group": group.id}
        for i, s in enumerate(students, start=1):
            ids[f"student{i}"] = s.id

        yield ids
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_task(db, seed):
    """Create a task in the seeded group, optionally moved to a status."""

    def _make(assignees=("student1",), status="done", title="Build the API"):
        task = tasks.create_task(
            db,
            seed["group"],
            seed["student1"],
            {"title": title, "assignee_ids": [seed[a] for a in assignees]},
        )
        if status != "todo":
            task = tasks.update_task_status(db, task.id, status, seed["student1"])
        return task

    return _make


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth(client):
    """auth("student1@example.com") -> Authorization header for that user."""

    def _auth(email: str) -> dict:
        return auth_header(login(client, email))

    return _auth
