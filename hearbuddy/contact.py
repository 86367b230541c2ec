"""Async client for the contact form backed by the Web3Forms service.

WHY: The app's contact page forwards feedback through a hosted
form-submission service instead of running its own mail server. The
request is a single POST, but callers still need typed input validation,
a clear result, and a typed error for transport failures.

HOW: ContactClient wraps httpx.AsyncClient and is used as an async
context manager. submit() validates a ContactMessage with pydantic,
posts it as form data together with the access key, and maps the JSON
reply ({"success": bool, "message": str}) to a ContactResult.

RULES:
- Always use the async context manager (async with ContactClient() as client:)
- access_key defaults to load_contact_access_key() from .env
- A 2xx reply with success=false returns ContactResult(success=False), no exception
- Non-JSON replies and HTTP status >= 500 raise ContactSubmissionError
- Network failures are wrapped in ContactSubmissionError
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from pydantic import BaseModel, Field

from hearbuddy.config import WEB3FORMS_ENDPOINT, load_contact_access_key

SUCCESS_MESSAGE = "Form Submitted Successfully"
FAILURE_MESSAGE = "Error submitting form. Please try again."


class ContactSubmissionError(Exception):
    """Raised when the form service cannot be reached or replies unusably.

    RULES:
    - status_code is None for network-level failures
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ContactMessage(BaseModel):
    """Fields collected by the contact form."""

    name: str = Field(min_length=1, description="Sender's name.")
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$", description="Reply address.")
    message: str = Field(min_length=1, description="Message body.")
    subject: str = Field(default="New HearBuddy contact message", description="Email subject line.")


@dataclass
class ContactResult:
    """Outcome shown to the user after a submission."""

    success: bool
    message: str


class ContactClient:
    """Async client for the Web3Forms submission endpoint.

    RULES:
    - Use as: async with ContactClient() as client: ...
    - transport can be injected (httpx.MockTransport in tests)
    """

    def __init__(
        self,
        access_key: str | None = None,
        endpoint: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_key = access_key or load_contact_access_key()
        self._endpoint = endpoint or WEB3FORMS_ENDPOINT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ContactClient:
        self._client = httpx.AsyncClient(
            transport=self._transport,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(30.0, connect=10.0),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "ContactClient must be used as an async context manager: "
                "async with ContactClient() as client: ..."
            )
        return self._client

    async def submit(self, message: ContactMessage) -> ContactResult:
        """Post one contact message to the form service.

        Args:
            message: Validated contact form fields.

        Returns:
            ContactResult with the service's verdict and a user-facing message.
        """
        client = self._ensure_client()
        form = message.model_dump()
        form["access_key"] = self._access_key

        try:
            resp = await client.post(self._endpoint, data=form)
        except httpx.HTTPError as exc:
            raise ContactSubmissionError("Contact service unreachable: {}".format(exc)) from exc

        if resp.status_code >= 500:
            raise ContactSubmissionError(
                "Contact service error {}: {}".format(resp.status_code, resp.text),
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ContactSubmissionError(
                "Contact service returned a non-JSON reply",
                status_code=resp.status_code,
            ) from exc

        if data.get("success"):
            return ContactResult(success=True, message=SUCCESS_MESSAGE)
        return ContactResult(success=False, message=FAILURE_MESSAGE)
