# academics/forms.py

"""
Validation forms for academic API payloads.
"""

from django import forms
import logging

from .models import StudentProgression

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT PROGRESSION ITEM FORM
# =============================================================================

class ProgressionItemForm(forms.Form):
    """
    Validates the shape of one item of a batch progression request.

    Only the shape is checked here. Whether the student, level, session or
    class exist is decided per student while processing, so a bad id fails
    that student alone instead of the whole batch.
    """

    # JSON key on the wire -> form field
    PAYLOAD_FIELDS = {
        'studentId': 'student_id',
        'toGradeLevelId': 'to_academic_level_id',
        'toAcademicYearId': 'to_academic_session_id',
        'toClassRoomId': 'to_class_id',
        'progressionType': 'progression_type',
        'reason': 'reason',
    }

    REQUIRED_MESSAGE = (
        'studentId, toGradeLevelId, toAcademicYearId, and progressionType '
        'are required for each progression'
    )

    student_id = forms.CharField()
    to_academic_level_id = forms.CharField()
    to_academic_session_id = forms.CharField()
    to_class_id = forms.CharField(required=False)
    progression_type = forms.ChoiceField(
        choices=StudentProgression.PROGRESSION_TYPE_CHOICES,
        error_messages={
            'invalid_choice': 'progressionType must be either PROMOTED or RETAINED',
        }
    )
    reason = forms.CharField(required=False)

    @classmethod
    def from_payload(cls, payload):
        """Build a bound form from one JSON item (camelCase keys)"""
        data = {
            field_name: payload.get(key)
            for key, field_name in cls.PAYLOAD_FIELDS.items()
            if payload.get(key) is not None
        }
        return cls(data=data)

    def clean(self):
        cleaned_data = super().clean()
        if (
            cleaned_data.get('progression_type') == StudentProgression.PROMOTED
            and not cleaned_data.get('to_class_id')
            and 'to_class_id' not in self.errors
        ):
            self.add_error('to_class_id', forms.ValidationError(
                'toClassRoomId is required when progressionType is PROMOTED',
                code='required_for_promotion',
            ))
        return cleaned_data

    def get_error_message(self):
        """
        First error as a caller-facing message naming the JSON field.
        Missing required fields share one message.
        """
        wire_names = {field_name: key for key, field_name in self.PAYLOAD_FIELDS.items()}
        for field_name, errors in self.errors.as_data().items():
            for error in errors:
                if error.code == 'required':
                    return self.REQUIRED_MESSAGE
                message = ' '.join(error.messages)
                if error.code in ('invalid_choice', 'required_for_promotion'):
                    return message
                wire_name = wire_names.get(field_name, field_name)
                return f"{wire_name}: {message}"
        return 'Invalid progression'
