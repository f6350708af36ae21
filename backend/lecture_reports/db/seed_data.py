"""
Database Seed Data Module

Roles plus a small sample data set (faculties, courses, staff, students,
classes, reports). Every seed function is idempotent.
Run with: python -m lecture_reports.db.seed_data [clear]
"""
import asyncio
from datetime import date, time, timedelta
from typing import Dict, List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import AsyncSessionLocal, init_db
from lecture_reports.core.security import get_password_hash
from lecture_reports.models import (
    AuditLog,
    Course,
    Enrollment,
    Faculty,
    LectureClass,
    Notification,
    Rating,
    Report,
    Role,
    User,
)
from lecture_reports.models.user import UserRole, ROLE_DESCRIPTIONS

DEFAULT_PASSWORD = "password123"


# ==================== Sample Data Constants ====================

SAMPLE_FACULTIES = [
    {"name": "Faculty of Information Communication Technology", "code": "FICT", "description": "ICT and Computer Science programs"},
    {"name": "Faculty of Business", "code": "FB", "description": "Business and Management programs"},
    {"name": "Faculty of Design", "code": "FD", "description": "Creative Design and Media programs"},
]

SAMPLE_COURSES = [
    {"faculty": "FICT", "code": "DIWA2110", "name": "Web Application Development", "description": "Diploma in Web Application Development", "total_registered": 45},
    {"faculty": "FICT", "code": "DIPR2110", "name": "Programming Fundamentals", "description": "Introduction to Programming", "total_registered": 50},
    {"faculty": "FICT", "code": "DIDB2110", "name": "Database Systems", "description": "Database Design and Management", "total_registered": 40},
    {"faculty": "FB", "code": "BAMG3110", "name": "Business Management", "description": "Principles of Business Management", "total_registered": 35},
    {"faculty": "FD", "code": "DIGD2110", "name": "Graphic Design", "description": "Fundamentals of Graphic Design", "total_registered": 30},
]

SAMPLE_USERS = [
    {"email": "admin@luct.ac.ls", "first_name": "System", "last_name": "Administrator", "role": UserRole.ADMIN},
    {"email": "borotho@luct.ac.ls", "first_name": "John", "last_name": "Borotho", "role": UserRole.LECTURER},
    {"email": "mokoena@luct.ac.ls", "first_name": "Sarah", "last_name": "Mokoena", "role": UserRole.LECTURER},
    {"email": "moloi@luct.ac.ls", "first_name": "David", "last_name": "Moloi", "role": UserRole.PRL},
    {"email": "khumalo@luct.ac.ls", "first_name": "Mary", "last_name": "Khumalo", "role": UserRole.PL},
    {"email": "liteboho@student.luct.ac.ls", "first_name": "Liteboho", "last_name": "Molaoa", "role": UserRole.STUDENT},
    {"email": "thabo@student.luct.ac.ls", "first_name": "Thabo", "last_name": "Mofokeng", "role": UserRole.STUDENT},
]

SAMPLE_CLASSES = [
    {"course": "DIWA2110", "lecturer": "borotho@luct.ac.ls", "class_name": "DIWA2110-A", "venue": "Lab 101", "scheduled_time": time(8, 0), "day_of_week": "Monday"},
    {"course": "DIWA2110", "lecturer": "borotho@luct.ac.ls", "class_name": "DIWA2110-B", "venue": "Lab 102", "scheduled_time": time(10, 0), "day_of_week": "Monday"},
    {"course": "DIPR2110", "lecturer": "mokoena@luct.ac.ls", "class_name": "DIPR2110-A", "venue": "Lab 201", "scheduled_time": time(14, 0), "day_of_week": "Tuesday"},
    {"course": "DIDB2110", "lecturer": "mokoena@luct.ac.ls", "class_name": "DIDB2110-A", "venue": "Lab 202", "scheduled_time": time(16, 0), "day_of_week": "Wednesday"},
]

SAMPLE_ENROLLMENTS = [
    ("DIWA2110-A", "liteboho@student.luct.ac.ls"),
    ("DIPR2110-A", "liteboho@student.luct.ac.ls"),
    ("DIWA2110-B", "thabo@student.luct.ac.ls"),
]

SAMPLE_REPORTS = [
    {
        "class_name": "DIWA2110-A", "week": 6, "days_ago": 14, "actual_present": 38,
        "topic": "React Components and Props",
        "learning_outcomes": "Students can create functional components, understand props, and build reusable UI elements",
        "recommendations": "More practical exercises needed for state management",
    },
    {
        "class_name": "DIWA2110-B", "week": 6, "days_ago": 14, "actual_present": 42,
        "topic": "React State and Hooks",
        "learning_outcomes": "Students understand useState hook and can manage component state",
        "recommendations": "Good participation, continue with more examples",
    },
    {
        "class_name": "DIPR2110-A", "week": 6, "days_ago": 13, "actual_present": 45,
        "topic": "Python Functions and Modules",
        "learning_outcomes": "Students can define functions, use parameters, and create modules",
        "recommendations": "Some students struggling with return values - review needed",
    },
]


# ==================== Seed Functions ====================

async def ensure_roles(db: AsyncSession) -> List[Role]:
    """Insert the fixed role set if missing"""
    result = await db.execute(select(Role.name))
    existing = set(result.scalars().all())

    created = []
    for role in UserRole:
        if role.value not in existing:
            entry = Role(name=role.value, description=ROLE_DESCRIPTIONS[role])
            db.add(entry)
            created.append(entry)

    if created:
        await db.flush()
    return created


async def seed_faculties(db: AsyncSession) -> Dict[str, Faculty]:
    faculties = {}
    for data in SAMPLE_FACULTIES:
        result = await db.execute(select(Faculty).where(Faculty.code == data["code"]))
        faculty = result.scalar_one_or_none()
        if not faculty:
            faculty = Faculty(**data)
            db.add(faculty)
        faculties[data["code"]] = faculty

    await db.flush()
    print(f"Faculties ready: {len(faculties)}")
    return faculties


async def seed_courses(db: AsyncSession, faculties: Dict[str, Faculty]) -> Dict[str, Course]:
    courses = {}
    for data in SAMPLE_COURSES:
        result = await db.execute(select(Course).where(Course.code == data["code"]))
        course = result.scalar_one_or_none()
        if not course:
            course = Course(
                faculty_id=faculties[data["faculty"]].id,
                code=data["code"],
                name=data["name"],
                description=data["description"],
                total_registered=data["total_registered"],
            )
            db.add(course)
        courses[data["code"]] = course

    await db.flush()
    print(f"Courses ready: {len(courses)}")
    return courses


async def seed_users(db: AsyncSession) -> Dict[str, User]:
    """Create sample users, all sharing DEFAULT_PASSWORD"""
    users = {}
    password_hash = get_password_hash(DEFAULT_PASSWORD)

    for data in SAMPLE_USERS:
        result = await db.execute(select(User).where(User.email == data["email"]))
        user = result.scalar_one_or_none()
        if not user:
            user = User(
                email=data["email"],
                first_name=data["first_name"],
                last_name=data["last_name"],
                role=data["role"].value,
                password_hash=password_hash,
            )
            db.add(user)
        users[data["email"]] = user

    await db.flush()
    print(f"Users ready: {len(users)} (password: {DEFAULT_PASSWORD})")
    return users


async def seed_classes(
    db: AsyncSession,
    courses: Dict[str, Course],
    users: Dict[str, User]
) -> Dict[str, LectureClass]:
    classes = {}
    for data in SAMPLE_CLASSES:
        result = await db.execute(select(LectureClass).where(LectureClass.class_name == data["class_name"]))
        cls = result.scalar_one_or_none()
        if not cls:
            cls = LectureClass(
                course_id=courses[data["course"]].id,
                lecturer_id=users[data["lecturer"]].id,
                class_name=data["class_name"],
                venue=data["venue"],
                scheduled_time=data["scheduled_time"],
                day_of_week=data["day_of_week"],
            )
            db.add(cls)
        classes[data["class_name"]] = cls

    await db.flush()

    for class_name, email in SAMPLE_ENROLLMENTS:
        class_id = classes[class_name].id
        student_id = users[email].id
        result = await db.execute(
            select(Enrollment.id).where(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
        )
        if result.scalar_one_or_none() is None:
            db.add(Enrollment(class_id=class_id, student_id=student_id))

    await db.flush()
    print(f"Classes ready: {len(classes)}")
    return classes


async def seed_reports(
    db: AsyncSession,
    classes: Dict[str, LectureClass],
    courses: Dict[str, Course]
) -> List[Report]:
    reports = []
    courses_by_id = {course.id: course for course in courses.values()}

    for data in SAMPLE_REPORTS:
        cls = classes[data["class_name"]]
        result = await db.execute(
            select(Report.id).where(
                Report.class_name == cls.class_name,
                Report.week_of_reporting == data["week"],
            )
        )
        if result.scalar_one_or_none() is not None:
            continue

        course = courses_by_id[cls.course_id]
        report = Report(
            faculty_id=course.faculty_id,
            class_id=cls.id,
            class_name=cls.class_name,
            course_id=course.id,
            course_code=course.code,
            lecturer_id=cls.lecturer_id,
            week_of_reporting=data["week"],
            lecture_date=date.today() - timedelta(days=data["days_ago"]),
            actual_present=data["actual_present"],
            total_registered=course.total_registered,
            venue=cls.venue,
            scheduled_time=cls.scheduled_time,
            topic=data["topic"],
            learning_outcomes=data["learning_outcomes"],
            recommendations=data["recommendations"],
        )
        db.add(report)
        reports.append(report)

    await db.flush()
    print(f"Created {len(reports)} reports")
    return reports


# ==================== Main Seed Function ====================

async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            await ensure_roles(db)
            faculties = await seed_faculties(db)
            courses = await seed_courses(db, faculties)
            users = await seed_users(db)
            classes = await seed_classes(db, courses, users)
            await seed_reports(db, classes, courses)

            await db.commit()
            print("=" * 50)
            print("Database seeding completed successfully!")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Clear all data from database (roles are kept)"""
    print("Clearing all data...")
    async with AsyncSessionLocal() as db:
        # Delete in reverse order of dependencies
        for model in (AuditLog, Notification, Rating, Report, Enrollment, LectureClass, Course, Faculty, User):
            await db.execute(delete(model))
        await db.commit()
        print("All data cleared!")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())
