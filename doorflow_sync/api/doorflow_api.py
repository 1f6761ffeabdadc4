"""
DoorFlow API wrapper for member synchronization.

Provides a high-level interface to the DoorFlow REST API for:
- Listing, creating, updating, and deleting people
- Listing groups, credential types, and access events
- Managing person credentials

Requests are sent one at a time with no retry; failures surface as
NotAuthenticatedError (401 or no token) or DoorFlowAPIError (anything else).
"""

import logging
from typing import Any, Optional, Protocol

import requests
from requests.exceptions import RequestException

# Default DoorFlow API host
DEFAULT_BASE_URL = "https://api.doorflow.com"

# API version prefix
API_PREFIX = "/api/3"

# HTTP timeout per request, in seconds
DEFAULT_TIMEOUT = 30.0

# Default number of events returned by list_events
DEFAULT_EVENT_LIMIT = 50

USER_AGENT = "doorflow-sync/0.1.0"

logger = logging.getLogger(__name__)


class DoorFlowAPIError(Exception):
    """
    Raised when a DoorFlow API operation fails.

    Attributes:
        status_code: HTTP status code, None for transport failures
        body: Response body text, if any
    """

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotAuthenticatedError(DoorFlowAPIError):
    """Raised when no valid access token is available or DoorFlow returns 401."""

    def __init__(
        self,
        message: str = "Not authenticated. Please connect to DoorFlow first.",
        body: str = "",
    ):
        super().__init__(message, status_code=401, body=body)


class TokenProvider(Protocol):
    """Anything that can hand out a current OAuth access token."""

    def get_access_token(self) -> Optional[str]: ...


class DoorFlowAPI:
    """
    DoorFlow API wrapper for people, groups, credentials and events.

    Attributes:
        auth: Token provider (normally a DoorFlowAuth instance)
        base_url: DoorFlow API host
        timeout: Per-request timeout in seconds

    Usage:
        api = DoorFlowAPI(auth)

        # List every person in one unpaginated request
        people = api.list_all_people()

        # Create a person
        person = api.create_person({"first_name": "Ada", "last_name": "L"})

        # Replace a person's groups
        api.update_person(person["id"], {"group_ids": [5, 7]})
    """

    def __init__(
        self,
        auth: TokenProvider,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the DoorFlow API wrapper.

        Args:
            auth: Token provider with a get_access_token() method
            base_url: DoorFlow API host (default https://api.doorflow.com)
            timeout: Per-request timeout in seconds (default 30)
            session: Optional requests session, created on first use if omitted
        """
        self.auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {"User-Agent": USER_AGENT, "Accept": "application/json"}
            )
        return self._session

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    def _request(
        self,
        method: str,
        path: str,
        operation_name: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send one authenticated request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path below the API prefix (e.g. "/people")
            operation_name: Name for logging and error messages
            params: Query parameters, None values are dropped
            json_body: JSON request body

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            NotAuthenticatedError: If there is no token or DoorFlow returns 401
            DoorFlowAPIError: For any other failure
        """
        token = self.auth.get_access_token()
        if not token:
            raise NotAuthenticatedError()

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self.session.request(
                method,
                self._url(path),
                params=params or None,
                json=json_body,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except RequestException as e:
            logger.error(f"{operation_name} failed: {e}")
            raise DoorFlowAPIError(f"Failed to {operation_name}: {e}") from e

        if response.status_code == 401:
            logger.warning(f"{operation_name} rejected: not authenticated")
            raise NotAuthenticatedError(body=response.text)

        if not response.ok:
            logger.error(
                f"{operation_name} failed with status {response.status_code}: "
                f"{response.text}"
            )
            raise DoorFlowAPIError(
                f"DoorFlow API error: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise DoorFlowAPIError(
                f"Invalid JSON from {operation_name}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    # =========================================================================
    # People
    # =========================================================================

    def list_people(
        self,
        email: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        skip_pagination: bool = False,
    ) -> list[dict[str, Any]]:
        """
        List people, optionally filtered by exact email.

        Args:
            email: Filter by exact email address
            page: Page number
            per_page: Results per page
            skip_pagination: Return all results in one response

        Returns:
            List of person dictionaries
        """
        params: dict[str, Any] = {
            "email": email,
            "page": page,
            "per_page": per_page,
        }
        if skip_pagination:
            params["skip_pagination"] = "true"
        return self._request("GET", "/people", "list people", params=params) or []

    def list_all_people(self) -> list[dict[str, Any]]:
        """List every person in a single unpaginated request."""
        people = self.list_people(skip_pagination=True)
        logger.debug(f"Fetched {len(people)} DoorFlow people")
        return people

    def get_person(self, person_id: int) -> dict[str, Any]:
        """Get a single person."""
        return self._request("GET", f"/people/{person_id}", "get person")

    def create_person(self, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Create a person.

        Args:
            fields: DoorFlow person fields (first_name, last_name, email,
                    group_ids, image_base64, system_id, ...)

        Returns:
            The created person, including its new id
        """
        person = self._request(
            "POST", "/people", "create person", json_body={"person": fields}
        )
        logger.debug(f"Created DoorFlow person {person.get('id')}")
        return person

    def update_person(self, person_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Update a person.

        A group_ids entry replaces the person's groups rather than merging.

        Args:
            person_id: DoorFlow person ID
            fields: Fields to change (group_ids, image_base64, ...)

        Returns:
            The updated person
        """
        return self._request(
            "PUT",
            f"/people/{person_id}",
            "update person",
            json_body={"person": fields},
        )

    def delete_person(self, person_id: int) -> None:
        """Delete a person."""
        self._request("DELETE", f"/people/{person_id}", "delete person")
        logger.debug(f"Deleted DoorFlow person {person_id}")

    # =========================================================================
    # Groups
    # =========================================================================

    def list_groups(self) -> list[dict[str, Any]]:
        """List all groups (static and dynamic)."""
        return self._request("GET", "/groups", "list groups") or []

    # =========================================================================
    # Credentials
    # =========================================================================

    def list_credential_types(self) -> list[dict[str, Any]]:
        """List the credential types available on the account."""
        return (
            self._request("GET", "/credential_types", "list credential types") or []
        )

    def list_person_credentials(self, person_id: int) -> list[dict[str, Any]]:
        """List the credentials held by a person."""
        return (
            self._request(
                "GET", f"/people/{person_id}/credentials", "list credentials"
            )
            or []
        )

    def create_credential(
        self,
        person_id: int,
        credential_type_id: int,
        value: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create a credential for a person.

        Each person can hold only one credential of each type; DoorFlow
        answers 422 for a duplicate type or an invalid value.

        Raises:
            DoorFlowAPIError: With a readable message for 422 responses
        """
        try:
            return self._request(
                "POST",
                f"/people/{person_id}/credentials",
                "create credential",
                json_body={
                    "person_credential": {
                        "credential_type_id": credential_type_id,
                        "value": value,
                    }
                },
            )
        except DoorFlowAPIError as e:
            if e.status_code == 422:
                raise DoorFlowAPIError(
                    "This person already has a credential of this type, "
                    "or the value is invalid.",
                    status_code=422,
                    body=e.body,
                ) from e
            raise

    def delete_credential(self, person_id: int, credential_id: str) -> None:
        """Delete one of a person's credentials."""
        self._request(
            "DELETE",
            f"/people/{person_id}/credentials/{credential_id}",
            "delete credential",
        )

    # =========================================================================
    # Events
    # =========================================================================

    def list_events(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        since: Optional[str] = None,
        event_codes: Optional[list[int]] = None,
        limit: int = DEFAULT_EVENT_LIMIT,
    ) -> list[dict[str, Any]]:
        """
        List access events, newest first.

        Args:
            first_name: Filter by person's first name
            last_name: Filter by person's last name
            since: ISO timestamp, only events after this time
            event_codes: Event codes to include
            limit: Maximum number of events

        Raises:
            DoorFlowAPIError: 403 when the event scope was not granted
        """
        params: dict[str, Any] = {
            "first_name": first_name,
            "last_name": last_name,
            "since": since,
            "event_codes": ",".join(str(c) for c in event_codes)
            if event_codes
            else None,
            "n": limit,
        }
        try:
            return self._request("GET", "/events", "list events", params=params) or []
        except DoorFlowAPIError as e:
            if e.status_code == 403:
                raise DoorFlowAPIError(
                    "Access denied. The account.event.access.readonly scope "
                    "may be required.",
                    status_code=403,
                    body=e.body,
                ) from e
            raise

    def __repr__(self) -> str:
        return f"DoorFlowAPI(base_url={self.base_url!r})"
