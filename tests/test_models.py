from datetime import date

import pytest
from django.core.exceptions import ValidationError

from academics.models import AcademicSession, StudentProgression
from academics.services import ProgressionProcessor, ProgressionRequest
from academics.utils import get_class_capacity_summary, get_next_academic_session
from students.models import Student
from utils.context import RequestContext

pytestmark = pytest.mark.django_db


@pytest.fixture
def progression(admin_user, p4_student, make_class, p5, session_2025):
    target = make_class(p5, session_2025, 'Blue', capacity=30)
    return ProgressionProcessor.process(
        ProgressionRequest(
            student_id=str(p4_student.pk),
            to_academic_level_id=str(p5.pk),
            to_academic_session_id=str(session_2025.pk),
            progression_type=StudentProgression.PROMOTED,
            to_class_id=str(target.pk),
        ),
        admin_user,
    )


# =============================================================================
# STUDENT PROGRESSION
# =============================================================================

def test_progression_records_cannot_be_edited(progression):
    progression.reason = 'Changed my mind'

    with pytest.raises(ValidationError):
        progression.save()

    progression.refresh_from_db()
    assert progression.reason == ''


def test_progression_records_cannot_be_deleted(progression):
    with pytest.raises(ValidationError):
        progression.delete()

    assert StudentProgression.objects.filter(pk=progression.pk).exists()


def test_progression_history_for_student(progression, p4_student):
    assert list(StudentProgression.objects.for_student(p4_student)) == [progression]


# =============================================================================
# ACADEMIC SESSION
# =============================================================================

def test_next_session_is_earliest_start_after_end(session_2024, session_2025):
    later = AcademicSession.objects.create(
        year_name='2026', start_date=date(2026, 2, 2), end_date=date(2026, 12, 4)
    )

    assert session_2024.get_next_session() == session_2025
    assert get_next_academic_session(session_2025) == later
    assert later.get_next_session() is None


def test_overlapping_session_is_not_next(session_2024):
    AcademicSession.objects.create(
        year_name='2024-2025', start_date=date(2024, 9, 2), end_date=date(2025, 7, 18)
    )

    assert session_2024.get_next_session() is None


def test_only_one_current_session(session_2024, session_2025):
    session_2025.is_current = True
    session_2025.save()

    session_2024.refresh_from_db()
    assert session_2024.is_current is False
    assert AcademicSession.get_current() == session_2025


@pytest.mark.parametrize('year_name', ['24', '2024/25', 'Year 2024'])
def test_session_year_name_format(year_name):
    with pytest.raises(ValidationError):
        AcademicSession.objects.create(
            year_name=year_name, start_date=date(2024, 1, 8), end_date=date(2024, 12, 1)
        )


def test_session_end_must_follow_start():
    with pytest.raises(ValidationError):
        AcademicSession.objects.create(
            year_name='2024', start_date=date(2024, 12, 1), end_date=date(2024, 1, 8)
        )


# =============================================================================
# CLASS CAPACITY
# =============================================================================

def test_capacity_summary(make_class, fill_class, p5, session_2025):
    blue = make_class(p5, session_2025, 'Blue', capacity=4)
    fill_class(blue, 3)

    summary = get_class_capacity_summary(blue)

    assert summary['occupancy'] == 3
    assert summary['available_capacity'] == 1
    assert summary['occupancy_percentage'] == 75.0
    assert summary['has_capacity'] is True
    assert summary['is_full'] is False


def test_capacity_summary_without_capacity(make_class, p5, session_2025):
    summary = get_class_capacity_summary(make_class(p5, session_2025, 'Blue', capacity=None))

    assert summary['is_configured'] is False
    assert summary['has_capacity'] is False


# =============================================================================
# STUDENT & AUDIT FIELDS
# =============================================================================

def test_admission_number_is_required_and_unique(make_student):
    student = make_student()
    duplicate = Student(
        admission_number=student.admission_number,
        first_name='Other',
        last_name='Okello',
        gender='M',
        admission_date=date(2024, 2, 5),
    )
    unnumbered = Student(first_name='New', last_name='Okello', gender='M', admission_date=date(2024, 2, 5))

    with pytest.raises(ValidationError) as exc_info:
        duplicate.validate_unique()
    assert 'admission_number' in exc_info.value.message_dict

    with pytest.raises(ValidationError) as exc_info:
        unnumbered.clean_fields(exclude=['created_at', 'updated_at'])
    assert 'admission_number' in exc_info.value.message_dict


def test_audit_fields_follow_request_context(admin_user, make_student):
    with RequestContext(user=admin_user, ip_address='10.0.0.7'):
        student = make_student()

    assert student.created_by_id == str(admin_user.pk)
    assert student.created_from_ip == '10.0.0.7'
    assert student.created_at is not None
