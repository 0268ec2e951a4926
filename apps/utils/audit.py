# utils/audit.py

import json
import logging
from django.utils import timezone
from utils.context import get_request_context

audit_logger = logging.getLogger("academic_audit")
logger = logging.getLogger(__name__)


def log_academic_activity(
    action,
    user=None,
    target_object=None,
    student=None,
    academic_session=None,
    old_values=None,
    new_values=None,
    notes=None,
    batch_id=None,
):
    """
    Write a structured audit line for an academic action to the
    "academic_audit" logger.

    Args:
        action (str): Type of academic action (e.g., STUDENT_PROMOTED).
        user (User instance, optional): User performing the action. Falls back
            to the user in the current request context.
        target_object (Model instance, optional): Object created or affected.
        student (Student instance, optional): Related student.
        academic_session (AcademicSession instance, optional): Context session.
        old_values (dict, optional): Values before the change.
        new_values (dict, optional): Values after the change.
        notes (str, optional): Free-text notes.
        batch_id (str, optional): Groups entries written by one bulk operation.
    """
    try:
        context = get_request_context() or {}
        if user is None:
            user = context.get('user')

        entry = {
            'action': action,
            'timestamp': timezone.now().isoformat(),
            'user_id': str(user.pk) if user is not None else None,
            'username': user.get_username() if user is not None else None,
            'ip_address': context.get('ip_address'),
            'object_type': target_object.__class__.__name__ if target_object is not None else None,
            'object_id': str(target_object.pk) if target_object is not None else None,
            'student_id': str(student.pk) if student is not None else None,
            'academic_session': str(academic_session) if academic_session is not None else None,
            'old_values': old_values or {},
            'new_values': new_values or {},
            'notes': notes or '',
            'batch_id': batch_id,
        }
        audit_logger.info(json.dumps(entry, default=str))

    except Exception as e:
        logger.error(f"Error in academic activity logging: {e}", exc_info=True)
