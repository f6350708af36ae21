"""
Lecture Reports - Test Configuration and Fixtures
"""
import os
from datetime import date, timedelta
from typing import AsyncGenerator, Callable
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''

from lecture_reports.main import app
from lecture_reports.core.database import Base, get_db
from lecture_reports.core.security import get_password_hash, create_access_token, build_token_claims
from lecture_reports.db.seed_data import ensure_roles
from lecture_reports.models import Course, Enrollment, Faculty, LectureClass, Report, User, UserRole

fake = Faker()

TEST_PASSWORD = 'testpassword123'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database (tables + roles) for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        await ensure_roles(session)
        await session.commit()
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


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


# ============================================
# Users
# ============================================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """Factory creating a committed user with the given role"""
    async def _make_user(role: UserRole, **overrides) -> User:
        user = User(
            email=overrides.pop('email', fake.unique.email()),
            password_hash=get_password_hash(overrides.pop('password', TEST_PASSWORD)),
            first_name=overrides.pop('first_name', fake.first_name()),
            last_name=overrides.pop('last_name', fake.last_name()),
            role=role.value,
            **overrides
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


def headers_for(user: User) -> dict:
    """Bearer headers carrying an access token for `user`"""
    token = create_access_token(build_token_claims(user))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def lecturer(make_user) -> User:
    return await make_user(UserRole.LECTURER)


@pytest.fixture
async def other_lecturer(make_user) -> User:
    return await make_user(UserRole.LECTURER)


@pytest.fixture
async def student(make_user) -> User:
    return await make_user(UserRole.STUDENT)


@pytest.fixture
async def prl_user(make_user) -> User:
    return await make_user(UserRole.PRL)


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN)


@pytest.fixture
def auth_headers() -> Callable:
    return headers_for


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def lecturer_headers(lecturer: User) -> dict:
    return headers_for(lecturer)


@pytest.fixture
def student_headers(student: User) -> dict:
    return headers_for(student)


@pytest.fixture
def prl_headers(prl_user: User) -> dict:
    return headers_for(prl_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


# ============================================
# Academic structure
# ============================================

@pytest.fixture
async def faculty(db_session: AsyncSession) -> Faculty:
    faculty = Faculty(name='Faculty of Information Communication Technology', code='FICT')
    db_session.add(faculty)
    await db_session.commit()
    await db_session.refresh(faculty)
    return faculty


@pytest.fixture
async def course(db_session: AsyncSession, faculty: Faculty) -> Course:
    course = Course(
        faculty_id=faculty.id,
        code='DIWA2110',
        name='Web Application Development',
        total_registered=45,
    )
    db_session.add(course)
    await db_session.commit()
    await db_session.refresh(course)
    return course


@pytest.fixture
async def lecture_class(db_session: AsyncSession, course: Course, lecturer: User) -> LectureClass:
    cls = LectureClass(
        course_id=course.id,
        lecturer_id=lecturer.id,
        class_name='BSCSEM1-A',
        venue='Lab 101',
    )
    db_session.add(cls)
    await db_session.commit()
    await db_session.refresh(cls)
    return cls


@pytest.fixture
async def enrolled_student(db_session: AsyncSession, student: User, lecture_class: LectureClass) -> User:
    db_session.add(Enrollment(class_id=lecture_class.id, student_id=student.id))
    await db_session.commit()
    return student


def report_payload(course: Course, **overrides) -> dict:
    """Valid report submission body"""
    payload = {
        'class_name': 'BSCSEM1-A',
        'week_of_reporting': 6,
        'lecture_date': (date.today() - timedelta(days=1)).isoformat(),
        'course_id': course.id,
        'actual_present': 38,
        'total_registered': 45,
        'venue': 'Lab 101',
        'topic': 'React Components and Props',
        'learning_outcomes': 'Students can build reusable components',
        'recommendations': 'More practical exercises',
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def report_data(course: Course) -> Callable:
    """Factory for valid submission bodies against `course`"""
    def _report_data(**overrides) -> dict:
        return report_payload(course, **overrides)

    return _report_data


@pytest.fixture
async def report(db_session: AsyncSession, course: Course, lecturer: User) -> Report:
    """A pending report owned by `lecturer`"""
    report = Report(
        faculty_id=course.faculty_id,
        class_name='BSCSEM1-A',
        course_id=course.id,
        course_code=course.code,
        lecturer_id=lecturer.id,
        week_of_reporting=6,
        lecture_date=date.today() - timedelta(days=2),
        actual_present=40,
        total_registered=50,
        topic='Python Functions and Modules',
        learning_outcomes='Students can define functions',
    )
    db_session.add(report)
    await db_session.commit()
    await db_session.refresh(report)
    return report
