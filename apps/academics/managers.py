# academics/managers.py

from django.db import models
from django.db.models import Count
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC SESSION QUERYSET
# =============================================================================

class AcademicSessionQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def starting_after(self, session):
        """Sessions whose start date is strictly after the given session's end date"""
        return self.filter(start_date__gt=session.end_date).order_by('start_date', 'created_at')


# =============================================================================
# CLASS QUERYSET
# =============================================================================

class ClassQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def for_level_and_session(self, academic_level, academic_session):
        return self.filter(
            academic_level=academic_level,
            academic_session=academic_session,
        )

    def in_allocation_order(self):
        """
        Stable order used when searching for a free seat: oldest class first,
        primary key as tie-breaker. Repeated searches over unchanged data
        always return the same class.
        """
        return self.order_by('created_at', 'id')

    def with_occupancy(self):
        """
        Annotate each class with `occupancy`, the number of students whose
        current class it is. Cannot be combined with select_for_update().
        """
        return self.annotate(occupancy=Count('students', distinct=True))


class ClassManager(models.Manager.from_queryset(ClassQuerySet)):
    """Manager for Class with capacity helpers"""

    def occupancy_for(self, class_ids):
        """
        Return {class_id: occupancy} for the given class ids in one grouped
        query. Classes without students are reported as 0.
        """
        from students.models import Student

        class_ids = list(class_ids)
        counts = {class_id: 0 for class_id in class_ids}
        rows = (
            Student.objects.filter(current_class_id__in=class_ids)
            .values('current_class_id')
            .annotate(total=Count('id'))
            .order_by()
        )
        for row in rows:
            counts[row['current_class_id']] = row['total']
        return counts


# =============================================================================
# STUDENT PROGRESSION QUERYSET
# =============================================================================

class StudentProgressionQuerySet(models.QuerySet):

    def for_student(self, student):
        return self.filter(student=student)

    def into_session(self, academic_session):
        return self.filter(to_academic_session=academic_session)

    def latest_first(self):
        return self.order_by('-effective_date', '-created_at')
