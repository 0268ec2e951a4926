"""Shared fixtures for academics/students progression tests."""
from datetime import date, datetime, timedelta
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from accounts.models import UserProfile
from academics.models import AcademicLevel, AcademicSession, Class
from students.models import Student

# Fixed base so allocation order (created_at, id) never depends on clock resolution
CLASS_CREATED_BASE = timezone.make_aware(datetime(2020, 1, 1, 8, 0))

_class_sequence = count()
_student_sequence = count(1)


def _make_user(username, role=None, **extra):
    user = get_user_model().objects.create_user(
        username=username, password='pass1234', **extra
    )
    if role is not None:
        UserProfile.objects.create(user=user, role=role)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user('registrar.admin', role='ADMINISTRATOR')


@pytest.fixture
def teacher_user(db):
    return _make_user('class.teacher', role='TEACHER')


@pytest.fixture
def accountant_user(db):
    return _make_user('bursar', role='ACCOUNTANT')


@pytest.fixture
def session_2024(db):
    return AcademicSession.objects.create(
        year_name='2024',
        start_date=date(2024, 2, 5),
        end_date=date(2024, 12, 6),
        is_current=True,
    )


@pytest.fixture
def session_2025(db):
    return AcademicSession.objects.create(
        year_name='2025',
        start_date=date(2025, 2, 3),
        end_date=date(2025, 12, 5),
    )


@pytest.fixture
def p4(db):
    return AcademicLevel.objects.create(name='Primary 4', code='P4', order=4)


@pytest.fixture
def p5(db):
    return AcademicLevel.objects.create(name='Primary 5', code='P5', order=5)


@pytest.fixture
def make_class(db):
    """Create a class; later calls sort after earlier ones in allocation order."""
    def _make_class(level, session, name, capacity=30, section=None, is_active=True):
        class_instance = Class(
            academic_level=level,
            academic_session=session,
            name=name,
            section=section,
            capacity=capacity,
            is_active=is_active,
        )
        class_instance.created_at = CLASS_CREATED_BASE + timedelta(minutes=next(_class_sequence))
        class_instance.save()
        return class_instance
    return _make_class


@pytest.fixture
def make_student(db):
    def _make_student(current_class=None, first_name=None, last_name='Okello'):
        number = next(_student_sequence)
        return Student.objects.create(
            admission_number=f'24/SCH/{number:04d}',
            first_name=first_name or f'Student{number:03d}',
            last_name=last_name,
            gender='F' if number % 2 else 'M',
            admission_date=date(2024, 2, 5),
            current_class=current_class,
        )
    return _make_student


@pytest.fixture
def fill_class(make_student):
    """Put `n` new students into a class."""
    def _fill_class(class_instance, n):
        return [make_student(current_class=class_instance) for _ in range(n)]
    return _fill_class


@pytest.fixture
def p4_blue_2024(make_class, p4, session_2024):
    return make_class(p4, session_2024, 'Blue', capacity=30)


@pytest.fixture
def p4_student(make_student, p4_blue_2024):
    return make_student(current_class=p4_blue_2024, first_name='Amina', last_name='Nakato')
