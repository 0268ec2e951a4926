# academics/models.py

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.core.exceptions import ValidationError
from django.utils import timezone
from utils.models import BaseModel
from .managers import (
    AcademicSessionQuerySet,
    ClassManager,
    StudentProgressionQuerySet,
)
import re
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC SESSION MODEL
# =============================================================================

class AcademicSession(BaseModel):
    """
    Academic year used for class placement and student progression.

    Examples:
    - "2024" (Feb 5 - Dec 6)
    - "2024-2025" (Sep 2 - Jul 18)

    Ordering between years is defined by dates only: the next session of a
    session is the earliest one whose start date is strictly after its end
    date.
    """

    year_name = models.CharField(
        "Academic Year",
        max_length=20,
        help_text="E.g., '2024', '2024-2025', '2024/2025'"
    )

    start_date = models.DateField("Start Date", db_index=True)
    end_date = models.DateField("End Date", db_index=True)

    is_current = models.BooleanField(
        "Is Current",
        default=False,
        db_index=True,
        help_text="Only one session can be current at a time"
    )
    is_active = models.BooleanField("Is Active", default=True, db_index=True)

    objects = AcademicSessionQuerySet.as_manager()

    def __str__(self):
        return self.year_name

    @property
    def name(self):
        return self.year_name

    def clean(self):
        """Validate dates and year name format"""
        super().clean()
        errors = {}

        if self.start_date and self.end_date and self.start_date >= self.end_date:
            errors['end_date'] = 'End date must be after start date'

        if self.year_name:
            if '/' in self.year_name or '-' in self.year_name:
                pattern = r'^(20\d{2})[\/-](20\d{2})$'
                if not re.match(pattern, self.year_name):
                    errors['year_name'] = 'Year name must be in format "YYYY-YYYY" or "YYYY/YYYY"'
            elif not re.match(r'^20\d{2}$', self.year_name):
                errors['year_name'] = 'Year name must be in format "YYYY"'

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()

        # Ensure only one current session
        if self.is_current:
            AcademicSession.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)

        super().save(*args, **kwargs)

    # -------------------------------------------------------------------------
    # NAVIGATION
    # -------------------------------------------------------------------------

    def get_next_session(self):
        """
        The session students progress into: the earliest session starting
        strictly after this one ends, or None.
        """
        return AcademicSession.objects.starting_after(self).first()

    @classmethod
    def get_current(cls):
        """Session flagged current, else the active session containing today"""
        session = cls.objects.filter(is_current=True).order_by('-start_date').first()
        if session:
            return session
        today = timezone.localdate()
        return cls.objects.active().filter(
            start_date__lte=today,
            end_date__gte=today
        ).order_by('start_date').first()

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Academic Session"
        verbose_name_plural = "Academic Sessions"
        indexes = [
            models.Index(fields=['start_date', 'end_date'], name='session_dates_idx'),
        ]


# =============================================================================
# ACADEMIC LEVEL MODEL
# =============================================================================

class AcademicLevel(BaseModel):
    """Model for different academic levels/classes (e.g., Grade 1, Grade 2, Form 1, etc.)"""

    name = models.CharField("Level Name", max_length=50)
    code = models.CharField("Level Code", max_length=10, unique=True)
    description = models.TextField("Description", blank=True)

    # Ordering and progression
    order = models.PositiveIntegerField("Order", help_text="Numeric level used for ordering")
    next_level = models.ForeignKey(
        'self',
        verbose_name="Next Level",
        on_delete=models.SET_NULL,
        related_name="previous_levels",
        null=True,
        blank=True,
        help_text="The level students progress to after completing this one"
    )

    is_active = models.BooleanField("Is Active", default=True)
    is_graduation_level = models.BooleanField(
        "Is Graduation Level",
        default=False,
        help_text="Whether completing this level constitutes graduation"
    )

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['order']
        verbose_name = "Academic Level"
        verbose_name_plural = "Academic Levels"


# =============================================================================
# CLASS MODEL
# =============================================================================

class Class(BaseModel):
    """
    A class group of one academic level in one academic session
    (e.g., "Primary 4 Blue, section A, 2025"). Students point at their
    current class; occupancy is the number of students doing so.
    """
    academic_level = models.ForeignKey(
        AcademicLevel,
        verbose_name="Academic Level",
        on_delete=models.PROTECT,
        related_name="classes"
    )
    academic_session = models.ForeignKey(
        AcademicSession,
        verbose_name="Academic Session",
        on_delete=models.PROTECT,
        related_name="classes"
    )
    name = models.CharField(
        "Class Name",
        max_length=50,
        help_text="Stays the same across sessions for the same group, e.g. 'Blue'"
    )
    section = models.CharField(
        "Section",
        max_length=10,
        blank=True,
        null=True,
        help_text="E.g., A, B, C (leave blank if no sections)"
    )

    # Capacity - a missing value is a configuration error, not "unlimited"
    capacity = models.PositiveIntegerField(
        "Capacity",
        null=True,
        blank=True,
        help_text="Maximum number of students in this class"
    )

    is_active = models.BooleanField("Is Active", default=True, db_index=True)

    objects = ClassManager()

    def __str__(self):
        return f"{self.get_display_name()} ({self.academic_session})"

    def get_display_name(self):
        """Get a clean display name for the class"""
        if self.section:
            return f"{self.academic_level.name} {self.name} {self.section}"
        return f"{self.academic_level.name} {self.name}"

    # -------------------------------------------------------------------------
    # CAPACITY METHODS
    # -------------------------------------------------------------------------

    def get_occupancy(self):
        """Number of students whose current class is this one"""
        return self.students.count()

    class Meta:
        ordering = ['academic_level__order', 'name', 'section']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        constraints = [
            models.UniqueConstraint(
                fields=['academic_level', 'academic_session', 'name', 'section'],
                condition=Q(section__isnull=False),
                name='unique_class_with_section'
            ),
            models.UniqueConstraint(
                fields=['academic_level', 'academic_session', 'name'],
                condition=Q(section__isnull=True),
                name='unique_class_without_section'
            ),
        ]
        indexes = [
            models.Index(fields=['academic_level', 'academic_session'], name='class_level_session_idx'),
        ]


# =============================================================================
# STUDENT PROGRESSION MODEL
# =============================================================================

class StudentProgression(BaseModel):
    """
    Append-only ledger of promotions and retentions.

    One record is written for every student whose class reassignment was
    committed by a progression run, in the same transaction. The "from"
    fields snapshot the student's placement at processing time and are empty
    when the student had no class. Records are never edited or deleted.
    """

    PROMOTED = 'PROMOTED'
    RETAINED = 'RETAINED'

    PROGRESSION_TYPE_CHOICES = [
        (PROMOTED, 'Promoted'),
        (RETAINED, 'Retained'),
    ]

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.PROTECT,
        related_name="progressions"
    )

    # Snapshot before the move
    from_academic_session = models.ForeignKey(
        AcademicSession,
        verbose_name="From Academic Session",
        on_delete=models.PROTECT,
        related_name="progressions_out",
        null=True,
        blank=True
    )
    from_academic_level = models.ForeignKey(
        AcademicLevel,
        verbose_name="From Academic Level",
        on_delete=models.PROTECT,
        related_name="progressions_out",
        null=True,
        blank=True
    )
    from_class = models.ForeignKey(
        Class,
        verbose_name="From Class",
        on_delete=models.PROTECT,
        related_name="progressions_out",
        null=True,
        blank=True
    )

    # Destination
    to_academic_session = models.ForeignKey(
        AcademicSession,
        verbose_name="To Academic Session",
        on_delete=models.PROTECT,
        related_name="progressions_in"
    )
    to_academic_level = models.ForeignKey(
        AcademicLevel,
        verbose_name="To Academic Level",
        on_delete=models.PROTECT,
        related_name="progressions_in"
    )
    to_class = models.ForeignKey(
        Class,
        verbose_name="To Class",
        on_delete=models.PROTECT,
        related_name="progressions_in"
    )

    progression_type = models.CharField(
        "Progression Type",
        max_length=10,
        choices=PROGRESSION_TYPE_CHOICES,
        db_index=True
    )
    reason = models.TextField("Reason", blank=True)
    effective_date = models.DateTimeField("Effective Date", db_index=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name="Processed By",
        on_delete=models.PROTECT,
        related_name="processed_progressions"
    )

    objects = StudentProgressionQuerySet.as_manager()

    def __str__(self):
        return (
            f"{self.student} - {self.get_progression_type_display()} "
            f"to {self.to_academic_level} ({self.to_academic_session})"
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Progression records cannot be modified once written.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Progression records cannot be deleted.")

    class Meta:
        ordering = ['-effective_date', '-created_at']
        verbose_name = "Student Progression"
        verbose_name_plural = "Student Progressions"
        indexes = [
            models.Index(fields=['student', 'to_academic_session'], name='progression_student_idx'),
            models.Index(fields=['to_academic_session', 'progression_type'], name='progression_session_type_idx'),
        ]
