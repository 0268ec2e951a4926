# students/models.py

from django.db import models
from django.core.exceptions import ValidationError
from django_countries.fields import CountryField
from utils.models import BaseModel

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT MODEL
# =============================================================================

class Student(BaseModel):
    """Core model for student information"""

    # -------------------------------------------------------------------------
    # CHOICE FIELDS
    # -------------------------------------------------------------------------

    GENDER_CHOICES = (
        ('M', 'Male'),
        ('F', 'Female'),
    )

    ENROLLMENT_STATUS_CHOICES = (
        ('ACTIVE', 'Active'),
        ('SUSPENDED', 'Suspended'),
        ('GRADUATED', 'Graduated'),
        ('TRANSFERRED', 'Transferred'),
        ('WITHDRAWN', 'Withdrawn'),
        ('DEFERRED', 'Deferred'),
    )

    # -------------------------------------------------------------------------
    # IDENTIFICATION & BASIC INFORMATION
    # -------------------------------------------------------------------------

    admission_number = models.CharField(
        "Admission Number",
        max_length=20,
        unique=True,
        db_index=True
    )
    admission_date = models.DateField("Admission Date")

    first_name = models.CharField("First Name", max_length=50)
    middle_name = models.CharField("Middle Name", max_length=50, blank=True)
    last_name = models.CharField("Last Name", max_length=50)
    date_of_birth = models.DateField("Date of Birth", null=True, blank=True)
    gender = models.CharField("Gender", max_length=1, choices=GENDER_CHOICES)
    nationality = CountryField("Nationality", blank=True, null=True)

    # -------------------------------------------------------------------------
    # ACADEMIC PLACEMENT
    # -------------------------------------------------------------------------

    # Grade and session are derived through the class.
    # Changed only by administrative edit or a committed progression.
    current_class = models.ForeignKey(
        'academics.Class',
        verbose_name="Current Class",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students'
    )

    # -------------------------------------------------------------------------
    # STATUS & TRACKING
    # -------------------------------------------------------------------------

    enrollment_status = models.CharField(
        "Enrollment Status",
        max_length=20,
        choices=ENROLLMENT_STATUS_CHOICES,
        default='ACTIVE',
        db_index=True
    )

    class Meta:
        ordering = ['admission_number']
        verbose_name = "Student"
        verbose_name_plural = "Students"
        indexes = [
            models.Index(fields=['first_name', 'last_name'], name='student_name_idx'),
            models.Index(fields=['current_class'], name='student_current_class_idx'),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.admission_number})"

    # -------------------------------------------------------------------------
    # PROPERTIES
    # -------------------------------------------------------------------------

    @property
    def full_name(self):
        return self.get_full_name()

    @property
    def current_academic_level(self):
        return self.current_class.academic_level if self.current_class_id else None

    @property
    def current_academic_session(self):
        return self.current_class.academic_session if self.current_class_id else None

    # -------------------------------------------------------------------------
    # HELPER METHODS
    # -------------------------------------------------------------------------

    def get_full_name(self):
        """Get student's full name"""
        if self.middle_name:
            return f"{self.first_name} {self.middle_name} {self.last_name}"
        return f"{self.first_name} {self.last_name}"

    def clean(self):
        """Validate student data"""
        super().clean()
        if self.date_of_birth and self.admission_date and self.date_of_birth >= self.admission_date:
            raise ValidationError({
                'date_of_birth': "Date of birth must be before the admission date"
            })
