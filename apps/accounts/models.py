# accounts/models.py

from django.conf import settings
from django.db import models
import logging
import uuid

logger = logging.getLogger(__name__)


# =============================================================================
# USER PROFILE MODEL
# =============================================================================

class UserProfile(models.Model):
    """Extended profile information for school users"""

    USER_ROLES = [
        ('SUPER_ADMIN', 'Super Administrator'),
        ('ADMINISTRATOR', 'School Administrator'),
        ('DIRECTOR_STUDIES', 'Director of Studies'),
        ('REGISTRAR', 'Registrar'),
        ('HEAD_TEACHER', 'Head Teacher'),
        ('DEPUTY_HEAD', 'Deputy Head Teacher'),
        ('HOD', 'Head of Department'),
        ('TEACHER', 'Teacher'),
        ('ACCOUNTANT', 'Accountant'),
        ('RECEPTIONIST', 'Receptionist'),
        ('SUPPORT_STAFF', 'Support Staff'),
    ]

    ADMIN_ROLES = ('SUPER_ADMIN', 'ADMINISTRATOR', 'DIRECTOR_STUDIES')
    TEACHING_ROLES = ('TEACHER', 'HEAD_TEACHER', 'DEPUTY_HEAD', 'HOD')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # -------------------------------------------------------------------------
    # CORE RELATIONSHIPS
    # -------------------------------------------------------------------------

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )
    role = models.CharField(
        "Role",
        max_length=30,
        choices=USER_ROLES,
        default='TEACHER'
    )
    employee_id = models.CharField("Employee ID", max_length=30, blank=True)
    is_active = models.BooleanField("Is Active", default=True)

    created_at = models.DateTimeField("Created At", auto_now_add=True)
    updated_at = models.DateTimeField("Updated At", auto_now=True)

    class Meta:
        db_table = 'user_profiles'
        verbose_name = 'User Profile'
        verbose_name_plural = 'User Profiles'
        indexes = [
            models.Index(fields=['role'], name='user_profile_role_idx'),
        ]

    def __str__(self):
        return f"{self.user.get_username()} - {self.get_role_display()}"

    # -------------------------------------------------------------------------
    # PERMISSION HELPER METHODS
    # -------------------------------------------------------------------------

    def is_admin_user(self):
        """Check if user has admin privileges"""
        return self.role in self.ADMIN_ROLES or self.user.is_superuser

    def is_teacher(self):
        """Check if user is a teacher"""
        return self.role in self.TEACHING_ROLES

    def can_run_progression(self):
        """Promotion/retention writes are restricted to school administrators"""
        return self.is_active and self.is_admin_user()

    def can_view_progression(self):
        return self.is_active and (self.is_admin_user() or self.is_teacher())


# =============================================================================
# PERMISSION CHECKS
# =============================================================================

def _get_profile(user):
    if user is None or not user.is_authenticated:
        return None
    try:
        return user.profile
    except UserProfile.DoesNotExist:
        return None


def user_can_run_progression(user):
    """
    Whether this operator may run batch promotion/retention.
    Superusers are always allowed, even without a profile.
    """
    if user is not None and user.is_authenticated and user.is_superuser:
        return True
    profile = _get_profile(user)
    return bool(profile and profile.can_run_progression())


def user_can_view_progression(user):
    if user is not None and user.is_authenticated and user.is_superuser:
        return True
    profile = _get_profile(user)
    return bool(profile and profile.can_view_progression())
