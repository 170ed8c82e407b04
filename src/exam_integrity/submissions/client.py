"""
Submission service REST client.

Implements the submission source interface against the submission
service's HTTP API, so detection and grading can run in a different
process from the one that owns submission storage.
"""

import os
from typing import Any

import httpx

from ..utils.logging import get_logger
from .models import Grade, Submission
from .store import SubmissionError, SubmissionNotFoundError

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------


class SubmissionServiceError(SubmissionError):
    """The submission service could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


# -----------------------------------------------------------------------------
# API Client
# -----------------------------------------------------------------------------


class SubmissionServiceClient:
    """
    HTTP client for the submission service.

    Usage:
        with SubmissionServiceClient("http://submissions:8080") as client:
            peers = client.list_submissions(exam_id=3)
    """

    # Request timeout in seconds
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the submission service
            token: Bearer token forwarded on every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the service)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SubmissionServiceClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Core request handling
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            SubmissionServiceError: On transport failures and non-2xx answers
        """
        logger.debug(f"{method} {self.base_url}{path}")

        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Submission service returned HTTP {status} for {method} {path}")
            raise SubmissionServiceError(f"HTTP {status}: {e.response.text}", status) from e
        except httpx.RequestError as e:
            logger.error(f"Request to submission service failed: {e}")
            raise SubmissionServiceError(f"Request failed: {e}") from e

        return response.json()

    # -------------------------------------------------------------------------
    # Submission source interface
    # -------------------------------------------------------------------------

    def get_submission(self, submission_id: int) -> Submission:
        """Fetch a submission with its files and grades."""
        try:
            data = self._request("GET", f"/api/submissions/{submission_id}")
        except SubmissionServiceError as e:
            if e.status_code == 404:
                raise SubmissionNotFoundError(submission_id) from e
            raise
        return Submission.from_api_response(data)

    def list_submissions(self, exam_id: int) -> list[Submission]:
        """Fetch every submission of an exam."""
        data = self._request("GET", "/api/submissions", params={"examId": exam_id})
        return [Submission.from_api_response(item) for item in data or [] if item]

    def create_grade(
        self,
        submission_id: int,
        examiner_id: int,
        scores: str,
        comment: str,
        total_score: float,
    ) -> Grade:
        """Grade a submission; the service marks it Graded."""
        payload = {
            "submissionId": submission_id,
            "examinerId": examiner_id,
            "scores": scores,
            "comment": comment,
            "totalScore": total_score,
        }
        data = self._request("POST", f"/api/submissions/{submission_id}/grade", json=payload)
        return Grade.from_api_response(data)


def create_client(
    base_url: str,
    token: str | None = None,
    token_env_var: str = "SUBMISSION_SERVICE_TOKEN",
    timeout: float = SubmissionServiceClient.DEFAULT_TIMEOUT,
) -> SubmissionServiceClient:
    """
    Create a client, reading the token from the environment if not given.

    Args:
        base_url: Submission service URL
        token: Bearer token (uses env var if not provided)
        token_env_var: Environment variable name for the token
        timeout: Request timeout in seconds

    Returns:
        Configured SubmissionServiceClient instance
    """
    if token is None:
        token = os.environ.get(token_env_var)

    return SubmissionServiceClient(base_url=base_url, token=token, timeout=timeout)
