# academics/utils.py
"""
Utility functions for academics app
Helper functions for session navigation and class capacity
"""

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ACADEMIC SESSION UTILITIES
# =============================================================================

def get_next_academic_session(session):
    """
    Get the session students progress into after the given one.

    The next session is the one whose start date is strictly after the
    given session's end date. When several qualify, the earliest wins.

    Args:
        session (AcademicSession): The session being completed

    Returns:
        AcademicSession or None
    """
    if session is None:
        return None

    candidates = list(session.__class__.objects.starting_after(session)[:2])
    if len(candidates) > 1:
        logger.debug(
            f"Several sessions start after {session}; using earliest: {candidates[0]}"
        )
    return candidates[0] if candidates else None


# =============================================================================
# CLASS UTILITIES
# =============================================================================

def get_classes_for_level_and_session(academic_level, academic_session, active_only=True):
    """
    Get the classes of one academic level in one session, in allocation order.

    Args:
        academic_level (AcademicLevel): The level
        academic_session (AcademicSession): The session
        active_only (bool): Whether to return only active classes

    Returns:
        QuerySet: Classes annotated with occupancy
    """
    from .models import Class

    classes = Class.objects.for_level_and_session(academic_level, academic_session)

    if active_only:
        classes = classes.active()

    return classes.with_occupancy().in_allocation_order()


def get_class_capacity_summary(class_instance):
    """
    Get capacity summary for a class.

    Uses the `occupancy` annotation when present, otherwise counts.

    Args:
        class_instance (Class): The class

    Returns:
        dict: Capacity information
    """
    occupancy = getattr(class_instance, 'occupancy', None)
    if occupancy is None:
        occupancy = class_instance.get_occupancy()

    capacity = class_instance.capacity
    if capacity is None:
        return {
            'occupancy': occupancy,
            'capacity': None,
            'available_capacity': 0,
            'occupancy_percentage': None,
            'is_full': True,
            'has_capacity': False,
            'is_configured': False,
        }

    return {
        'occupancy': occupancy,
        'capacity': capacity,
        'available_capacity': max(0, capacity - occupancy),
        'occupancy_percentage': round((occupancy / capacity) * 100, 1) if capacity > 0 else 0,
        'is_full': occupancy >= capacity,
        'has_capacity': occupancy < capacity,
        'is_configured': True,
    }
