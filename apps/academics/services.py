# academics/services.py

"""
Student Progression Services

Business logic for moving students into a new academic session:
- Class resolution with capacity limits (first free seat, stable order)
- Per-student promotion/retention in one atomic transaction
- Batch runs that isolate each student's failure

Each student is processed in its own @transaction.atomic unit. A failure
rolls back that student only; the class reassignment and the progression
record are committed together or not at all.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .exceptions import (
    ProgressionError,
    StudentNotFoundError,
    AcademicLevelNotFoundError,
    AcademicSessionNotFoundError,
    ClassNotFoundError,
    ClassMismatchError,
    ClassAtCapacityError,
    ClassCapacityNotConfiguredError,
    NoAvailableClassError,
)
from .forms import ProgressionItemForm
from .models import AcademicLevel, AcademicSession, Class, StudentProgression
from .utils import get_next_academic_session, get_classes_for_level_and_session
from students.models import Student
from utils.audit import log_academic_activity

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST VALUE OBJECT
# =============================================================================

@dataclass(frozen=True)
class ProgressionRequest:
    """
    One validated progression instruction. Optional fields are None when absent.

    Ids are kept as the caller sent them; an id that names no row (malformed
    or unknown) fails that student only, when it is looked up.
    """

    student_id: str
    to_academic_level_id: str
    to_academic_session_id: str
    progression_type: str
    to_class_id: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def from_cleaned_data(cls, cleaned_data):
        return cls(
            student_id=cleaned_data['student_id'],
            to_academic_level_id=cleaned_data['to_academic_level_id'],
            to_academic_session_id=cleaned_data['to_academic_session_id'],
            progression_type=cleaned_data['progression_type'],
            to_class_id=cleaned_data.get('to_class_id') or None,
            reason=cleaned_data.get('reason') or None,
        )


# =============================================================================
# CLASS RESOLVER
# =============================================================================

class ClassResolver:
    """Finds a class with a free seat for a level and session"""

    @staticmethod
    def get_occupancy(class_instance, exclude_student=None):
        """
        Students currently in the class, not counting `exclude_student`
        (the student being moved, who frees their own seat if already there).
        """
        occupancy = Class.objects.occupancy_for([class_instance.pk])[class_instance.pk]
        if exclude_student is not None and exclude_student.current_class_id == class_instance.pk:
            occupancy -= 1
        return occupancy

    @staticmethod
    def ensure_capacity_configured(class_instance):
        if class_instance.capacity is None:
            raise ClassCapacityNotConfiguredError(
                f"Class {class_instance.get_display_name()} has no capacity configured"
            )

    @staticmethod
    def has_free_seat(class_instance, exclude_student=None):
        ClassResolver.ensure_capacity_configured(class_instance)
        occupancy = ClassResolver.get_occupancy(class_instance, exclude_student=exclude_student)
        return occupancy < class_instance.capacity

    @staticmethod
    def get_candidates(academic_level, academic_session, lock=False):
        """
        Active classes of the level/session in allocation order (oldest
        first). With `lock`, the rows are locked in that same order, so every
        placement path takes class locks in one consistent order. Only valid
        inside a transaction when locking.
        """
        classes = (
            Class.objects
            .active()
            .for_level_and_session(academic_level, academic_session)
            .in_allocation_order()
        )
        if lock:
            classes = classes.select_for_update()
        return list(classes)

    @staticmethod
    def first_with_free_seat(candidates, exclude_student=None):
        """
        First of `candidates` with occupancy below capacity, or None.

        Raises:
            ClassCapacityNotConfiguredError: a scanned class has no capacity
        """
        occupancy = Class.objects.occupancy_for(c.pk for c in candidates)

        for class_instance in candidates:
            ClassResolver.ensure_capacity_configured(class_instance)
            seats_taken = occupancy[class_instance.pk]
            if exclude_student is not None and exclude_student.current_class_id == class_instance.pk:
                seats_taken -= 1
            if seats_taken < class_instance.capacity:
                return class_instance
        return None

    @staticmethod
    def find_available_class(academic_level, academic_session, lock=False, exclude_student=None):
        """
        First active class of the level/session with occupancy below capacity.

        Classes are scanned in allocation order (oldest first), so the same
        data always yields the same class. No balancing is attempted.

        Args:
            academic_level (AcademicLevel): Target level
            academic_session (AcademicSession): Target session
            lock (bool): Lock candidate class rows (select_for_update). Only
                valid inside a transaction.
            exclude_student (Student): Student being placed; not counted
                against the class they currently occupy.

        Returns:
            Class or None

        Raises:
            ClassCapacityNotConfiguredError: a scanned class has no capacity
        """
        candidates = ClassResolver.get_candidates(academic_level, academic_session, lock=lock)
        destination = ClassResolver.first_with_free_seat(candidates, exclude_student=exclude_student)
        if destination is None:
            logger.debug(
                f"No class with a free seat among {len(candidates)} active classes "
                f"for {academic_level} in {academic_session}"
            )
        return destination


# =============================================================================
# PROGRESSION PROCESSOR
# =============================================================================

class ProgressionProcessor:
    """Promotes or retains a single student"""

    @staticmethod
    @transaction.atomic
    def process(request, operator, batch_id=None):
        """
        Move one student into their destination class and record the move.

        Args:
            request (ProgressionRequest): What to do
            operator (User): User running the progression
            batch_id (str): Groups audit lines of one batch run

        Returns:
            StudentProgression: The record written

        Raises:
            ProgressionError: any reason this student could not be moved;
                nothing is written in that case
        """
        # =================================================================
        # STEP 1: LOAD STUDENT AND SNAPSHOT CURRENT PLACEMENT
        # =================================================================

        try:
            student = Student.objects.select_for_update().get(pk=request.student_id)
        except (Student.DoesNotExist, ValidationError, ValueError):
            raise StudentNotFoundError(f"Student {request.student_id} not found")

        from_class = student.current_class
        from_session = from_class.academic_session if from_class else None
        from_level = from_class.academic_level if from_class else None

        to_level = ProgressionProcessor._get_academic_level(request.to_academic_level_id)
        to_session = ProgressionProcessor._get_academic_session(request.to_academic_session_id)

        # =================================================================
        # STEP 2: RESOLVE DESTINATION CLASS
        # =================================================================

        if request.progression_type == StudentProgression.PROMOTED:
            destination = ProgressionProcessor._resolve_promotion_class(
                request, student, to_level, to_session
            )
        else:
            destination = ProgressionProcessor._resolve_retention_class(
                student, from_class, to_level, to_session
            )

        # =================================================================
        # STEP 3: REASSIGN STUDENT
        # =================================================================

        student.current_class = destination
        student.save(update_fields=['current_class'])

        # =================================================================
        # STEP 4: WRITE PROGRESSION RECORD
        # =================================================================

        progression = StudentProgression.objects.create(
            student=student,
            from_academic_session=from_session,
            from_academic_level=from_level,
            from_class=from_class,
            to_academic_session=to_session,
            to_academic_level=to_level,
            to_class=destination,
            progression_type=request.progression_type,
            reason=request.reason or '',
            effective_date=timezone.now(),
            processed_by=operator,
        )

        logger.info(
            f"{progression.get_progression_type_display()} {student.get_full_name()} "
            f"from {from_class.get_display_name() if from_class else 'no class'} "
            f"to {destination.get_display_name()} ({to_session})"
        )

        transaction.on_commit(lambda: log_academic_activity(
            action=f"STUDENT_{request.progression_type}",
            user=operator,
            target_object=progression,
            student=student,
            academic_session=to_session,
            old_values={
                'class': str(from_class.pk) if from_class else None,
                'academic_level': str(from_level.pk) if from_level else None,
                'academic_session': str(from_session.pk) if from_session else None,
            },
            new_values={
                'class': str(destination.pk),
                'academic_level': str(to_level.pk),
                'academic_session': str(to_session.pk),
            },
            notes=request.reason,
            batch_id=batch_id,
        ))

        return progression

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_academic_level(level_id):
        try:
            return AcademicLevel.objects.get(pk=level_id)
        except (AcademicLevel.DoesNotExist, ValidationError, ValueError):
            raise AcademicLevelNotFoundError(f"Academic level {level_id} not found")

    @staticmethod
    def _get_academic_session(session_id):
        try:
            return AcademicSession.objects.get(pk=session_id)
        except (AcademicSession.DoesNotExist, ValidationError, ValueError):
            raise AcademicSessionNotFoundError(f"Academic session {session_id} not found")

    # -------------------------------------------------------------------------
    # DESTINATION RESOLUTION
    # -------------------------------------------------------------------------

    @staticmethod
    def _resolve_promotion_class(request, student, to_level, to_session):
        """Explicitly selected class if valid, else the first class with a free seat"""
        if request.to_class_id:
            try:
                selected = Class.objects.select_for_update().get(pk=request.to_class_id)
            except (Class.DoesNotExist, ValidationError, ValueError):
                raise ClassNotFoundError(f"Selected class {request.to_class_id} not found")

            if (
                selected.academic_level_id != to_level.pk
                or selected.academic_session_id != to_session.pk
            ):
                raise ClassMismatchError(
                    "Selected class does not match target academic level or academic session"
                )

            if not ClassResolver.has_free_seat(selected, exclude_student=student):
                raise ClassAtCapacityError(
                    f"Selected class {selected.get_display_name()} is at capacity"
                )

            return selected

        destination = ClassResolver.find_available_class(
            to_level, to_session, lock=True, exclude_student=student
        )
        if destination is None:
            raise NoAvailableClassError(
                f"No available class found in target level/session for student {request.student_id}"
            )
        return destination

    @staticmethod
    def _resolve_retention_class(student, from_class, to_level, to_session):
        """
        The class with the same name and section in the target session when
        it exists and has a seat, else the first class with a free seat.

        All candidate classes are locked in allocation order before either
        choice is made.
        """
        candidates = ClassResolver.get_candidates(to_level, to_session, lock=True)

        if from_class is not None:
            same_class = next(
                (
                    c for c in candidates
                    if c.name == from_class.name and c.section == from_class.section
                ),
                None,
            )
            if same_class is not None:
                if ClassResolver.has_free_seat(same_class, exclude_student=student):
                    return same_class
                logger.info(
                    f"Class {same_class.get_display_name()} in {to_session} is full; "
                    f"looking for another class for {student.get_full_name()}"
                )

        destination = ClassResolver.first_with_free_seat(candidates, exclude_student=student)
        if destination is None:
            raise NoAvailableClassError(
                f"No available class found for retained student {student.pk}"
            )
        return destination


# =============================================================================
# BATCH PROGRESSION SERVICE
# =============================================================================

class BatchProgressionService:
    """Runs promotions/retentions for a list of students"""

    @staticmethod
    def validate_requests(items):
        """
        Check the shape of a whole batch before anything is processed.

        Args:
            items (list): JSON items as received

        Returns:
            list[ProgressionRequest]

        Raises:
            ValidationError: the batch is rejected as a whole
        """
        if not isinstance(items, list) or not items:
            raise ValidationError('Progressions array is required')

        max_batch_size = getattr(settings, 'PROGRESSION_MAX_BATCH_SIZE', None)
        if max_batch_size and len(items) > max_batch_size:
            raise ValidationError(
                f'At most {max_batch_size} progressions can be processed in one request'
            )

        requests = []
        for item in items:
            if not isinstance(item, dict):
                raise ValidationError('Each progression must be an object')

            form = ProgressionItemForm.from_payload(item)
            if not form.is_valid():
                raise ValidationError(form.get_error_message())

            requests.append(ProgressionRequest.from_cleaned_data(form.cleaned_data))

        return requests

    @staticmethod
    def process_batch(items, operator):
        """
        Validate and process a batch, one student at a time, in input order.

        A student's failure is recorded in their result and processing moves
        on; later students see every move committed before them.

        Args:
            items (list): JSON items as received
            operator (User): User running the progression

        Returns:
            dict: results (one per item, same order), succeeded, total,
                  message, batch_id

        Raises:
            ValidationError: malformed batch; nothing was processed
        """
        requests = BatchProgressionService.validate_requests(items)
        batch_id = uuid.uuid4().hex

        results = [
            BatchProgressionService._process_one(request, operator, batch_id)
            for request in requests
        ]

        succeeded = sum(1 for result in results if result['success'])
        message = f"Processed {succeeded} out of {len(requests)} progressions"

        logger.info(
            f"Batch progression {batch_id} by {operator.get_username()}: "
            f"{succeeded} succeeded, {len(requests) - succeeded} failed out of {len(requests)} total"
        )

        return {
            'results': results,
            'succeeded': succeeded,
            'total': len(requests),
            'message': message,
            'batch_id': batch_id,
        }

    @staticmethod
    def _process_one(request, operator, batch_id):
        try:
            progression = ProgressionProcessor.process(request, operator, batch_id=batch_id)
        except ProgressionError as e:
            logger.error(f"Error processing progression for student {request.student_id}: {e}")
            return {
                'student_id': request.student_id,
                'success': False,
                'error': str(e),
            }
        except Exception as e:
            logger.exception(f"Unexpected error processing progression for student {request.student_id}")
            return {
                'student_id': request.student_id,
                'success': False,
                'error': str(e) or 'Unknown error',
            }

        return {
            'student_id': request.student_id,
            'progression_id': progression.pk,
            'progression_type': progression.progression_type,
            'success': True,
        }


# =============================================================================
# PROGRESSION OVERVIEW
# =============================================================================

class ProgressionOverviewService:
    """Read-side data for preparing a progression run"""

    @staticmethod
    def get_overview(academic_level, academic_session):
        """
        Students currently placed in active classes of a level/session,
        with what they can progress into.

        Returns:
            dict: students, latest progression per student into the session,
                  current session, next session, current level, active levels,
                  classes of the next session students can be placed in
        """
        students = list(
            Student.objects.filter(
                current_class__academic_level=academic_level,
                current_class__academic_session=academic_session,
                current_class__is_active=True,
            )
            .select_related(
                'current_class',
                'current_class__academic_level',
                'current_class__academic_session',
            )
            .order_by('first_name', 'last_name')
        )

        latest_progressions = {}
        progressions = (
            StudentProgression.objects
            .into_session(academic_session)
            .filter(student__in=students)
            .latest_first()
        )
        for progression in progressions:
            latest_progressions.setdefault(progression.student_id, progression)

        # Destination classes: same level (retention) and next level (promotion)
        next_session = get_next_academic_session(academic_session)
        target_classes = []
        if next_session is not None:
            target_levels = [academic_level]
            if academic_level.next_level_id:
                target_levels.append(academic_level.next_level)
            for level in target_levels:
                target_classes.extend(
                    get_classes_for_level_and_session(level, next_session)
                    .select_related('academic_level')
                )

        return {
            'students': students,
            'latest_progressions': latest_progressions,
            'current_session': academic_session,
            'next_session': next_session,
            'current_level': academic_level,
            'available_levels': list(AcademicLevel.objects.filter(is_active=True).order_by('order')),
            'target_classes': target_classes,
        }
