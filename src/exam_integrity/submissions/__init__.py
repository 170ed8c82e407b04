"""
Submission module.

Submission, file and grade models, the repository interfaces the core
consumes, and their in-memory and HTTP implementations.
"""

from .client import SubmissionServiceClient, SubmissionServiceError, create_client
from .models import Grade, Submission, SubmissionFile, SubmissionStatus
from .store import (
    InMemorySubmissionStore,
    SubmissionError,
    SubmissionNotFoundError,
    SubmissionRepository,
    SubmissionSource,
)

__all__ = [
    # Models
    "Submission",
    "SubmissionFile",
    "SubmissionStatus",
    "Grade",
    # Interfaces and stores
    "SubmissionSource",
    "SubmissionRepository",
    "InMemorySubmissionStore",
    # HTTP client
    "SubmissionServiceClient",
    "create_client",
    # Exceptions
    "SubmissionError",
    "SubmissionNotFoundError",
    "SubmissionServiceError",
]
