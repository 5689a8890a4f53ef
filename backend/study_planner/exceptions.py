"""
Scheduling Exceptions

Custom exception classes raised by the scheduling engine and its
collaborators. Each carries an HTTP-style status code and an error code
so the host service can map them onto its own error responses.

Error taxonomy:
    - InvalidRangeError: end date before start date (fatal, caller must not proceed)
    - EstimationHookError: the AI workload estimator failed (always recovered
      locally with the fallback heuristic, never surfaced to the student)
    - ValidationError: malformed service input
    - TaskStoreError: the external task/class store failed

An empty study profile is not an exception; it produces an empty schedule
with a warning in the schedule metadata.

Usage:
    from study_planner.exceptions import InvalidRangeError

    raise InvalidRangeError("end_date is before start_date")
"""


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - HTTP status code
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Task store unavailable", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: int = None,
        error_code: str = None,
        details: dict = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class InvalidRangeError(ServiceError):
    """
    Planning range error.

    Raised when end_date is before start_date.
    """

    status_code = 422
    error_code = "invalid_range"


class EstimationHookError(ServiceError):
    """
    Workload estimator error.

    Raised by estimator adapters when the external call or its response
    parsing fails.
    """

    status_code = 502
    error_code = "estimation_hook_error"


class ValidationError(ServiceError):
    """
    Data validation error.

    Raised when service input fails validation.
    """

    status_code = 422
    error_code = "validation_error"


class TaskStoreError(ServiceError):
    """
    Task store error.

    Raised when tasks or classes cannot be read from the external store.
    """

    status_code = 503
    error_code = "task_store_error"

