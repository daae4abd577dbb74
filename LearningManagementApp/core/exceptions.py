"""Error taxonomy shared by the domain services and rendered by the API layer.

Role violations keep using ``rest_framework.exceptions.PermissionDenied``.
"""

import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class LMSError(APIException):
    """Base class for failures raised by the domain services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be completed."
    default_code = "lms_error"


class ValidationError(LMSError):
    """Input rejected before anything was persisted."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class NotFoundError(LMSError):
    """A referenced course, user, assignment or submission row does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class StoreError(LMSError):
    """The database rejected the write or could not be reached."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Data store failure."
    default_code = "store_error"


def translate_store_errors(func: F) -> F:
    """Re-raise database failures from a service call as ``StoreError``.

    Place it outside ``transaction.atomic`` so the rollback has already
    happened when the error surfaces.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Store failure in %s", func.__name__)
            raise StoreError(str(exc)) from exc
    return wrapper  # type: ignore[return-value]
