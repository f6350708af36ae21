"""
Tests for role checks on the user model
"""
from lecture_reports.models.user import REVIEWER_ROLES, User, UserRole
from lecture_reports.modules.auth.dependencies import describe_roles


def test_has_role_accepts_enum_and_name():
    user = User(role=UserRole.PRL.value)

    assert user.has_role(UserRole.PRL)
    assert user.has_role("PRL")
    assert user.has_role(UserRole.LECTURER, UserRole.PRL)
    assert not user.has_role(UserRole.ADMIN)


def test_reviewer_roles():
    assert {role.value for role in REVIEWER_ROLES} == {"Admin", "PRL", "PL"}
    assert describe_roles(REVIEWER_ROLES) == "Admins, PRL, and PL"


def test_students_and_lecturers_are_not_reviewers():
    for role in (UserRole.STUDENT, UserRole.LECTURER):
        assert not User(role=role.value).has_role(*REVIEWER_ROLES)
