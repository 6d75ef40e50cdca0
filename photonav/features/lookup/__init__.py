from .client import StudentLookupClient
from .errors import (
    LookupConfigurationError,
    LookupInputError,
    LookupRequestError,
    StudentLookupError,
    StudentNotFoundError,
)
from .models import StudentRecord

__all__ = [
    "StudentLookupClient",
    "StudentLookupError",
    "LookupConfigurationError",
    "LookupInputError",
    "LookupRequestError",
    "StudentNotFoundError",
    "StudentRecord",
]
