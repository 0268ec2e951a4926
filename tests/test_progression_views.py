import json

import pytest
from django.urls import reverse

from academics.models import StudentProgression
from academics.services import BatchProgressionService

pytestmark = pytest.mark.django_db

PROGRESSION_URL = '/academics/progression/'


def post_json(client, body):
    return client.post(
        PROGRESSION_URL,
        data=body if isinstance(body, str) else json.dumps(body),
        content_type='application/json',
    )


@pytest.fixture
def p5_blue_2025(make_class, p5, session_2025):
    return make_class(p5, session_2025, 'Blue', capacity=30)


# =============================================================================
# POST
# =============================================================================

def test_anonymous_caller_gets_401(client):
    response = post_json(client, {'progressions': []})

    assert response.status_code == 401
    assert response.json() == {'success': False, 'error': 'Authentication required'}


def test_teacher_cannot_run_progression(client, teacher_user):
    client.force_login(teacher_user)

    response = post_json(client, {'progressions': []})

    assert response.status_code == 403
    assert response.json()['success'] is False


def test_user_without_profile_cannot_run_progression(client, django_user_model):
    user = django_user_model.objects.create_user(username='noprofile', password='x')
    client.force_login(user)

    assert post_json(client, {'progressions': []}).status_code == 403


def test_invalid_json_gets_400(client, admin_user):
    client.force_login(admin_user)

    response = post_json(client, '{"progressions": [')

    assert response.status_code == 400
    assert response.json() == {'success': False, 'error': 'Invalid JSON body'}


def test_empty_batch_gets_400(client, admin_user):
    client.force_login(admin_user)

    response = post_json(client, {'progressions': []})

    assert response.status_code == 400
    assert response.json() == {'success': False, 'error': 'Progressions array is required'}


def test_unknown_grade_id_fails_only_that_item(
    client, admin_user, make_student, p4_blue_2024, p5, session_2025, p5_blue_2025
):
    client.force_login(admin_user)
    students = [make_student(current_class=p4_blue_2024) for _ in range(3)]
    progressions = [{
        'studentId': str(student.pk),
        'toGradeLevelId': str(p5.pk),
        'toAcademicYearId': str(session_2025.pk),
        'toClassRoomId': str(p5_blue_2025.pk),
        'progressionType': 'PROMOTED',
    } for student in students]
    progressions[1]['toGradeLevelId'] = 'nonexistent-grade'

    response = post_json(client, {'progressions': progressions})

    assert response.status_code == 200
    body = response.json()
    assert body['message'] == 'Processed 2 out of 3 progressions'
    assert [r['success'] for r in body['results']] == [True, False, True]
    assert body['results'][1]['studentId'] == str(students[1].pk)
    assert body['results'][1]['error'] == 'Academic level nonexistent-grade not found'


def test_successful_batch(client, admin_user, p4_student, p5, session_2025, p5_blue_2025):
    client.force_login(admin_user)

    response = post_json(client, {'progressions': [{
        'studentId': str(p4_student.pk),
        'toGradeLevelId': str(p5.pk),
        'toAcademicYearId': str(session_2025.pk),
        'toClassRoomId': str(p5_blue_2025.pk),
        'progressionType': 'PROMOTED',
        'reason': 'Passed',
    }]})

    assert response.status_code == 200
    body = response.json()
    record = StudentProgression.objects.get()
    assert body == {
        'success': True,
        'results': [{
            'studentId': str(p4_student.pk),
            'progressionId': str(record.pk),
            'progressionType': 'PROMOTED',
            'success': True,
        }],
        'message': 'Processed 1 out of 1 progressions',
    }
    # Audit fields are stamped from the request context
    assert record.created_by_id == str(admin_user.pk)


def test_failed_item_is_reported_inside_200(client, admin_user, p4_student, p4, session_2025):
    client.force_login(admin_user)

    response = post_json(client, {'progressions': [{
        'studentId': str(p4_student.pk),
        'toGradeLevelId': str(p4.pk),
        'toAcademicYearId': str(session_2025.pk),
        'progressionType': 'RETAINED',
    }]})

    assert response.status_code == 200
    result = response.json()['results'][0]
    assert result['success'] is False
    assert 'No available class' in result['error']
    assert 'progressionId' not in result
    assert response.json()['message'] == 'Processed 0 out of 1 progressions'


def test_unexpected_failure_outside_items_gets_500(client, admin_user, monkeypatch):
    client.force_login(admin_user)

    def explode(items, operator):
        raise RuntimeError('database went away')

    monkeypatch.setattr(BatchProgressionService, 'process_batch', explode)

    response = post_json(client, {'progressions': [{}]})

    assert response.status_code == 500
    assert response.json() == {'success': False, 'error': 'Internal server error'}


def test_superuser_without_profile_may_run_progression(client, django_user_model):
    root = django_user_model.objects.create_superuser(username='root', password='x')
    client.force_login(root)

    response = post_json(client, {'progressions': []})

    # Past the permission check; rejected on the payload instead
    assert response.status_code == 400


# =============================================================================
# GET
# =============================================================================

def test_overview_lists_students_of_level_and_session(
    client, teacher_user, make_student, make_class, p4_blue_2024, p4, p5, session_2024, session_2025
):
    zara = make_student(current_class=p4_blue_2024, first_name='Zara')
    adam = make_student(current_class=p4_blue_2024, first_name='Adam')
    closed = make_class(p4, session_2024, 'Closed', is_active=False)
    make_student(current_class=closed, first_name='Hidden')
    make_student(first_name='Unplaced')
    client.force_login(teacher_user)

    response = client.get(PROGRESSION_URL, {
        'gradeLevelId': str(p4.pk),
        'academicYearId': str(session_2024.pk),
    })

    assert response.status_code == 200
    body = response.json()
    assert [s['id'] for s in body['students']] == [str(adam.pk), str(zara.pk)]
    assert body['students'][0]['classRoom']['id'] == str(p4_blue_2024.pk)
    assert body['students'][0]['latestProgression'] is None
    assert body['currentAcademicYear']['id'] == str(session_2024.pk)
    assert body['nextAcademicYear']['id'] == str(session_2025.pk)
    assert body['currentGradeLevel']['id'] == str(p4.pk)
    assert [level['code'] for level in body['gradeLevels']] == ['P4', 'P5']
    assert body['targetClassRooms'] == []


def test_overview_lists_target_classes_of_next_session(
    client, teacher_user, make_class, fill_class, p4_student, p4, p5, session_2024, session_2025
):
    p4.next_level = p5
    p4.save()
    p4_red = make_class(p4, session_2025, 'Red', capacity=30)
    p5_blue = make_class(p5, session_2025, 'Blue', capacity=3)
    fill_class(p5_blue, 3)
    client.force_login(teacher_user)

    body = client.get(PROGRESSION_URL, {
        'gradeLevelId': str(p4.pk),
        'academicYearId': str(session_2024.pk),
    }).json()

    targets = {c['id']: c for c in body['targetClassRooms']}
    assert set(targets) == {str(p4_red.pk), str(p5_blue.pk)}
    assert targets[str(p4_red.pk)]['availableCapacity'] == 30
    assert targets[str(p5_blue.pk)]['occupancy'] == 3
    assert targets[str(p5_blue.pk)]['isFull'] is True


def test_overview_requires_both_parameters(client, teacher_user, p4):
    client.force_login(teacher_user)

    response = client.get(PROGRESSION_URL, {'gradeLevelId': str(p4.pk)})

    assert response.status_code == 400


def test_overview_forbidden_for_non_teaching_staff(client, accountant_user, p4, session_2024):
    client.force_login(accountant_user)

    response = client.get(PROGRESSION_URL, {
        'gradeLevelId': str(p4.pk),
        'academicYearId': str(session_2024.pk),
    })

    assert response.status_code == 403


# =============================================================================
# HISTORY & EXPORTS
# =============================================================================

@pytest.fixture
def recorded_progressions(admin_user, make_student, p4_blue_2024, p4, p5, session_2025, p5_blue_2025, make_class):
    make_class(p4, session_2025, 'Blue', capacity=30)
    promoted = make_student(current_class=p4_blue_2024)
    retained = make_student(current_class=p4_blue_2024)
    BatchProgressionService.process_batch([
        {
            'studentId': str(promoted.pk),
            'toGradeLevelId': str(p5.pk),
            'toAcademicYearId': str(session_2025.pk),
            'toClassRoomId': str(p5_blue_2025.pk),
            'progressionType': 'PROMOTED',
        },
        {
            'studentId': str(retained.pk),
            'toGradeLevelId': str(p4.pk),
            'toAcademicYearId': str(session_2025.pk),
            'progressionType': 'RETAINED',
        },
    ], admin_user)
    return promoted, retained


def test_history_lists_and_filters(client, teacher_user, recorded_progressions):
    promoted, retained = recorded_progressions
    client.force_login(teacher_user)
    url = reverse('academics:progression_history')

    everything = client.get(url).json()
    only_retained = client.get(url, {'progression_type': 'retained'}).json()
    one_student = client.get(url, {'student': str(promoted.pk)}).json()

    assert everything['pagination']['count'] == 2
    assert [r['studentId'] for r in only_retained['results']] == [str(retained.pk)]
    assert one_student['results'][0]['progressionType'] == 'PROMOTED'
    assert one_student['results'][0]['fromGradeLevelId'] is not None


def test_history_requires_login(client):
    assert client.get(reverse('academics:progression_history')).status_code == 401


def test_excel_export(client, admin_user, recorded_progressions):
    client.force_login(admin_user)

    response = client.get(reverse('academics:progression_export_excel'))

    assert response.status_code == 200
    assert response['Content-Type'] == (
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    assert response['Content-Disposition'].endswith('.xlsx"')
    assert response.content[:2] == b'PK'


def test_pdf_export(client, admin_user, recorded_progressions):
    client.force_login(admin_user)

    response = client.get(reverse('academics:progression_export_pdf'))

    assert response.status_code == 200
    assert response['Content-Type'] == 'application/pdf'
    assert response.content.startswith(b'%PDF')


def test_history_page_all_returns_every_record(client, admin_user, recorded_progressions):
    client.force_login(admin_user)

    body = client.get(reverse('academics:progression_history'), {'page': 'all'}).json()

    assert len(body['results']) == 2
    assert body['pagination']['numPages'] == 1
    assert body['pagination']['hasNext'] is False
