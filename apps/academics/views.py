# academics/views.py

from django.http import JsonResponse, HttpResponse
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_GET
from django.utils import timezone
from io import BytesIO
import json
import logging
import uuid

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from accounts.models import user_can_run_progression, user_can_view_progression
from utils.utils import paginate_queryset, parse_filters, get_page_metadata
from .models import AcademicLevel, AcademicSession, StudentProgression
from .services import BatchProgressionService, ProgressionOverviewService
from .utils import get_class_capacity_summary

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def _error(message, status):
    return JsonResponse({"success": False, "error": message}, status=status)


def _to_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _serialize_class(class_instance):
    if class_instance is None:
        return None
    return {
        "id": str(class_instance.pk),
        "name": class_instance.name,
        "section": class_instance.section,
        "displayName": class_instance.get_display_name(),
        "capacity": class_instance.capacity,
    }


def _serialize_target_class(class_instance):
    summary = get_class_capacity_summary(class_instance)
    data = _serialize_class(class_instance)
    data.update({
        "gradeLevelId": str(class_instance.academic_level_id),
        "academicYearId": str(class_instance.academic_session_id),
        "occupancy": summary['occupancy'],
        "availableCapacity": summary['available_capacity'],
        "isFull": summary['is_full'],
    })
    return data


def _serialize_session(session):
    if session is None:
        return None
    return {
        "id": str(session.pk),
        "name": session.year_name,
        "startDate": session.start_date.isoformat(),
        "endDate": session.end_date.isoformat(),
        "isCurrent": session.is_current,
    }


def _serialize_level(level):
    if level is None:
        return None
    return {
        "id": str(level.pk),
        "name": level.name,
        "code": level.code,
        "order": level.order,
    }


def _serialize_progression(progression):
    return {
        "id": str(progression.pk),
        "studentId": str(progression.student_id),
        "studentName": progression.student.get_full_name(),
        "admissionNumber": progression.student.admission_number,
        "progressionType": progression.progression_type,
        "fromAcademicYearId": str(progression.from_academic_session_id) if progression.from_academic_session_id else None,
        "fromGradeLevelId": str(progression.from_academic_level_id) if progression.from_academic_level_id else None,
        "fromClassRoomId": str(progression.from_class_id) if progression.from_class_id else None,
        "toAcademicYearId": str(progression.to_academic_session_id),
        "toGradeLevelId": str(progression.to_academic_level_id),
        "toClassRoomId": str(progression.to_class_id),
        "toClassRoom": progression.to_class.get_display_name(),
        "reason": progression.reason,
        "effectiveDate": progression.effective_date.isoformat(),
        "processedBy": progression.processed_by.get_username(),
    }


def _serialize_result(result):
    data = {
        "studentId": str(result['student_id']),
        "success": result['success'],
    }
    if result['success']:
        data["progressionId"] = str(result['progression_id'])
        data["progressionType"] = result['progression_type']
    else:
        data["error"] = result['error']
    return data


def _filtered_progressions(filters):
    progressions = StudentProgression.objects.select_related(
        'student',
        'from_class__academic_level',
        'to_class__academic_level',
        'from_academic_session',
        'to_academic_session',
        'to_academic_level',
        'processed_by',
    ).latest_first()

    if filters.get('student'):
        student_id = _to_uuid(filters['student'])
        if student_id is None:
            return progressions.none()
        progressions = progressions.filter(student_id=student_id)

    if filters.get('progression_type'):
        progressions = progressions.filter(progression_type=filters['progression_type'].upper())

    if filters.get('to_session'):
        session_id = _to_uuid(filters['to_session'])
        if session_id is None:
            return progressions.none()
        progressions = progressions.filter(to_academic_session_id=session_id)

    return progressions


# =============================================================================
# STUDENT PROGRESSION
# =============================================================================

@csrf_exempt
@require_http_methods(["GET", "POST"])
def student_progression(request):
    """
    GET: students of a level/session with what they can progress into.
    POST: promote or retain a batch of students.
    """
    if not request.user.is_authenticated:
        return _error("Authentication required", 401)

    if request.method == "POST":
        return _process_progressions(request)
    return _progression_overview(request)


def _process_progressions(request):
    if not user_can_run_progression(request.user):
        return _error("You do not have permission to process student progressions", 403)

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("Invalid JSON body", 400)

    if not isinstance(data, dict):
        return _error("Progressions array is required", 400)

    try:
        outcome = BatchProgressionService.process_batch(data.get("progressions"), request.user)
    except ValidationError as e:
        return _error(' '.join(e.messages), 400)
    except Exception:
        logger.exception("Error processing student progressions")
        return _error("Internal server error", 500)

    return JsonResponse({
        "success": True,
        "results": [_serialize_result(result) for result in outcome['results']],
        "message": outcome['message'],
    })


def _progression_overview(request):
    if not user_can_view_progression(request.user):
        return _error("You do not have permission to view student progressions", 403)

    level_id = _to_uuid(request.GET.get("gradeLevelId"))
    session_id = _to_uuid(request.GET.get("academicYearId"))
    if level_id is None or session_id is None:
        return _error("gradeLevelId and academicYearId are required", 400)

    try:
        academic_level = AcademicLevel.objects.get(pk=level_id)
    except AcademicLevel.DoesNotExist:
        return _error("Academic level not found", 404)
    try:
        academic_session = AcademicSession.objects.get(pk=session_id)
    except AcademicSession.DoesNotExist:
        return _error("Academic session not found", 404)

    overview = ProgressionOverviewService.get_overview(academic_level, academic_session)
    latest = overview['latest_progressions']

    students = []
    for student in overview['students']:
        progression = latest.get(student.pk)
        students.append({
            "id": str(student.pk),
            "admissionNumber": student.admission_number,
            "firstName": student.first_name,
            "lastName": student.last_name,
            "fullName": student.get_full_name(),
            "classRoom": _serialize_class(student.current_class),
            "gradeLevel": _serialize_level(student.current_academic_level),
            "academicYear": _serialize_session(student.current_academic_session),
            "latestProgression": {
                "id": str(progression.pk),
                "progressionType": progression.progression_type,
                "effectiveDate": progression.effective_date.isoformat(),
            } if progression else None,
        })

    return JsonResponse({
        "success": True,
        "students": students,
        "currentAcademicYear": _serialize_session(overview['current_session']),
        "nextAcademicYear": _serialize_session(overview['next_session']),
        "currentGradeLevel": _serialize_level(overview['current_level']),
        "gradeLevels": [_serialize_level(level) for level in overview['available_levels']],
        "targetClassRooms": [_serialize_target_class(c) for c in overview['target_classes']],
    })


# =============================================================================
# PROGRESSION HISTORY
# =============================================================================

@require_GET
def progression_history(request):
    """Paginated progression ledger as JSON"""
    if not request.user.is_authenticated:
        return _error("Authentication required", 401)
    if not user_can_view_progression(request.user):
        return _error("You do not have permission to view student progressions", 403)

    filters = parse_filters(request, ['student', 'progression_type', 'to_session'])
    progressions = _filtered_progressions(filters)
    page_obj, paginator = paginate_queryset(request, progressions)

    return JsonResponse({
        "success": True,
        "results": [_serialize_progression(progression) for progression in page_obj],
        "pagination": get_page_metadata(page_obj, paginator),
    })


# =============================================================================
# EXPORT VIEWS
# =============================================================================

EXPORT_HEADERS = [
    'Admission Number', 'Student', 'Type', 'From Session', 'From Class',
    'To Session', 'To Class', 'Effective Date', 'Processed By', 'Reason'
]


@login_required
def export_progressions_excel(request):
    """Export progression records to Excel"""
    if not user_can_view_progression(request.user):
        return HttpResponse("Forbidden", status=403)

    filters = parse_filters(request, ['student', 'progression_type', 'to_session'])
    progressions = _filtered_progressions(filters)

    wb = Workbook()
    ws = wb.active
    ws.title = "Progressions"

    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
        cell.font = Font(bold=True, color='FFFFFF')

    for progression in progressions:
        ws.append([
            progression.student.admission_number,
            progression.student.get_full_name(),
            progression.get_progression_type_display(),
            str(progression.from_academic_session) if progression.from_academic_session else '',
            progression.from_class.get_display_name() if progression.from_class else '',
            str(progression.to_academic_session),
            progression.to_class.get_display_name(),
            timezone.localtime(progression.effective_date).strftime('%Y-%m-%d %H:%M'),
            progression.processed_by.get_username(),
            progression.reason,
        ])

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="progressions_{timezone.now().strftime("%Y%m%d")}.xlsx"'

    wb.save(response)
    return response


@login_required
def export_progressions_pdf(request):
    """Export progression records to PDF"""
    if not user_can_view_progression(request.user):
        return HttpResponse("Forbidden", status=403)

    filters = parse_filters(request, ['student', 'progression_type', 'to_session'])
    progressions = _filtered_progressions(filters)

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ProgressionTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=20,
        alignment=TA_CENTER
    )

    elements.append(Paragraph('Student Progressions', title_style))
    elements.append(Spacer(1, 12))

    data = [['Admission #', 'Student', 'Type', 'From Class', 'To Class', 'To Session', 'Date']]
    for progression in progressions:
        data.append([
            progression.student.admission_number,
            progression.student.get_full_name()[:30],
            progression.get_progression_type_display(),
            progression.from_class.get_display_name()[:25] if progression.from_class else '',
            progression.to_class.get_display_name()[:25],
            str(progression.to_academic_session),
            timezone.localtime(progression.effective_date).strftime('%Y-%m-%d'),
        ])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F2F2F2')]),
    ]))

    elements.append(table)
    doc.build(elements)

    buffer.seek(0)
    response = HttpResponse(buffer, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="progressions_{timezone.now().strftime("%Y%m%d")}.pdf"'

    return response
