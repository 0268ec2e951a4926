# academics/exceptions.py

"""
Errors raised while promoting or retaining a single student.

They subclass ValueError like the other service-layer errors in the project.
A batch run catches them per student and reports the message in that
student's result instead of aborting the batch.
"""


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class ProgressionError(ValueError):
    """Base class for per-student progression failures"""
    pass


class StudentNotFoundError(ProgressionError):
    """Raised when the student named in a progression request does not exist"""
    pass


class AcademicLevelNotFoundError(ProgressionError):
    """Raised when the target academic level does not exist"""
    pass


class AcademicSessionNotFoundError(ProgressionError):
    """Raised when the target academic session does not exist"""
    pass


class ClassNotFoundError(ProgressionError):
    """Raised when an explicitly selected class does not exist"""
    pass


class ClassMismatchError(ProgressionError):
    """Raised when a selected class is not in the target level and session"""
    pass


class ClassAtCapacityError(ProgressionError):
    """Raised when a selected class has no free seat"""
    pass


class ClassCapacityNotConfiguredError(ProgressionError):
    """Raised when a class has no capacity set; a missing capacity is never unlimited"""
    pass


class NoAvailableClassError(ProgressionError):
    """Raised when no active class in the target level and session has a free seat"""
    pass
