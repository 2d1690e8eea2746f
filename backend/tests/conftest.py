"""
IPD Portal - Test Configuration and Fixtures
"""
import os
from io import BytesIO
from typing import AsyncGenerator, Callable, List, Optional
import pytest
import pandas as pd
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.user import User, UserRole
from app.models.team import Team
from app.models.project import Project

fake = Faker()


def auth_header(user: User) -> dict:
    """Bearer header for a user, signed the way the identity provider signs it"""
    token = create_access_token({'sub': str(user.id), 'email': user.email, 'role': user.role.value})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test"""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Users ====================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    async def _make_user(role: UserRole = UserRole.STUDENT, **kwargs) -> User:
        user = User(
            email=fake.unique.email(),
            name=fake.name(),
            role=role,
            is_active=True,
            **kwargs
        )
        db_session.add(user)
        await db_session.commit()
        return user
    return _make_user


@pytest.fixture
async def faculty_user(make_user) -> User:
    return await make_user(UserRole.FACULTY)


@pytest.fixture
async def reviewer_user(make_user) -> User:
    return await make_user(UserRole.REVIEWER)


@pytest.fixture
async def student_user(make_user) -> User:
    return await make_user(UserRole.STUDENT, sap_id=fake.unique.numerify("7000######"))


@pytest.fixture
def faculty_headers(faculty_user: User) -> dict:
    return auth_header(faculty_user)


@pytest.fixture
def reviewer_headers(reviewer_user: User) -> dict:
    return auth_header(reviewer_user)


@pytest.fixture
def student_headers(student_user: User) -> dict:
    return auth_header(student_user)


# ==================== Teams & projects ====================

@pytest.fixture
def make_project(db_session: AsyncSession, make_user) -> Callable:
    """Create a team (with a student leader) owning a project with the given title"""
    async def _make_project(title: str, leader: Optional[User] = None) -> Project:
        leader = leader or await make_user(UserRole.STUDENT)
        team = Team(
            name=f"Team {fake.unique.random_int(min=1, max=999999)}",
            description=fake.sentence(),
            leader_id=str(leader.id),
        )
        db_session.add(team)
        await db_session.flush()

        leader.team_id = str(team.id)
        project = Project(title=title, description=fake.sentence(), team_id=str(team.id))
        db_session.add(project)
        await db_session.commit()
        return project
    return _make_project


@pytest.fixture
async def project(make_project, student_user: User) -> Project:
    """Project owned by student_user's team"""
    return await make_project("Smart Attendance System", leader=student_user)


# ==================== Spreadsheets ====================

@pytest.fixture
def make_workbook() -> Callable:
    """Build .xlsx bytes from row dicts"""
    def _make_workbook(rows: List[dict], columns: Optional[List[str]] = None) -> bytes:
        buffer = BytesIO()
        pd.DataFrame(rows, columns=columns).to_excel(buffer, index=False, engine="openpyxl")
        return buffer.getvalue()
    return _make_workbook


@pytest.fixture
def headers_for() -> Callable:
    """Auth headers for an arbitrary user"""
    return auth_header
