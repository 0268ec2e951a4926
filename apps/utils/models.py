# utils/models.py

"""
Base model for School Management System with audit trail fields.

Key Features:
- UUID primary keys
- created/updated timestamps set on save
- User and IP tracking from the thread-local request context
- Change reason tracking
"""

from django.db import models
from django.utils import timezone
import uuid
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL - SCHOOL-SPECIFIC DATA
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base model with audit trail capabilities.

    Features:
    - Automatic user tracking (who created/updated)
    - IP address tracking (where operations came from)
    - Change reason tracking (why changes were made)
    - Timestamps (when operations happened)

    Audit fields are populated from utils.context, which is filled by
    AuditContextMiddleware for web requests and by RequestContext for
    scripts and background jobs.
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(
        "Created At",
        db_index=True,
        editable=False,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        "Updated At",
        db_index=True,
        editable=False,
        help_text="When this record was last updated"
    )

    # User tracking - CharField so records survive user deletion
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    created_from_ip = models.GenericIPAddressField(
        "Created From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was created"
    )
    updated_from_ip = models.GenericIPAddressField(
        "Updated From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was last updated"
    )

    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    # Fields refreshed on every save, also when update_fields is used
    AUDIT_UPDATE_FIELDS = ('updated_at', 'updated_by_id', 'updated_from_ip')

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Override save to:
        1. Set timestamps
        2. Populate audit trail fields (created_by, updated_by, IPs)
        """
        from utils.context import get_request_context

        is_new = self._state.adding
        now = timezone.now()

        # =========================================================================
        # STEP 1: SET TIMESTAMPS
        # =========================================================================
        if is_new:
            # Only set if not already provided (respects manual override)
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now

        # =========================================================================
        # STEP 2: POPULATE AUDIT FIELDS FROM REQUEST CONTEXT
        # =========================================================================
        context = get_request_context()

        if context:
            user = context.get('user')
            ip_address = context.get('ip_address')

            if is_new:
                if user and not self.created_by_id:
                    self.created_by_id = str(user.pk)
                if ip_address and not self.created_from_ip:
                    self.created_from_ip = ip_address

            if user:
                self.updated_by_id = str(user.pk)
            if ip_address:
                self.updated_from_ip = ip_address
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = list(dict.fromkeys([*update_fields, *self.AUDIT_UPDATE_FIELDS]))

        return super().save(*args, **kwargs)
