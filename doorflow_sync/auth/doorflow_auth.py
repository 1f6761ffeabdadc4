"""
OAuth2 authentication module for DoorFlow.

Provides the OAuth 2.0 authorization-code flow with support for:
- Authorization URL generation with CSRF state
- Code-for-token exchange
- Automatic token refresh (DoorFlow rotates refresh tokens)
- Token storage in the data directory with owner-only permissions
- Disconnect with best-effort token revocation
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

import requests
from oauthlib.oauth2 import OAuth2Error
from requests.exceptions import RequestException
from requests_oauthlib import OAuth2Session

from doorflow_sync.api.doorflow_api import DEFAULT_BASE_URL

# OAuth2 scopes required by the member sync
SCOPES = [
    "account.person",
    "account.channel.readonly",
    "account.event.access.readonly",
]

# OAuth endpoints, relative to the DoorFlow host
AUTHORIZE_PATH = "/oauth/authorize"
TOKEN_PATH = "/oauth/token"
REVOKE_PATH = "/oauth/revoke"

# Redirect URI used when none is configured
DEFAULT_REDIRECT_URI = "http://localhost:3000/api/auth/callback"

# Refresh the access token when it expires within this many seconds
REFRESH_BUFFER_SECONDS = 60

# Timeout for token and revoke requests (in seconds)
DEFAULT_AUTH_TIMEOUT = 10

TOKENS_FILE = "tokens.json"

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when authentication fails or credentials are invalid."""

    pass


@dataclass
class StoredTokens:
    """
    OAuth tokens as kept on disk.

    Attributes:
        access_token: Bearer token for API calls
        refresh_token: Token for obtaining a new access token; DoorFlow
                       issues a new one on every refresh
        expires_at: Unix timestamp (seconds) when the access token expires
        scope: Space-separated granted scopes
    """

    access_token: str
    refresh_token: str
    expires_at: int
    scope: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredTokens":
        return cls(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken", ""),
            expires_at=int(data.get("expiresAt", 0)),
            scope=data.get("scope", ""),
        )

    @classmethod
    def from_oauth_response(
        cls, token: dict[str, Any], previous: Optional["StoredTokens"] = None
    ) -> "StoredTokens":
        """
        Build stored tokens from an OAuth token endpoint response.

        Keeps the previous refresh token if the response omits one.
        """
        if "expires_at" in token:
            expires_at = int(token["expires_at"])
        else:
            expires_at = int(time.time()) + int(token.get("expires_in", 3600))

        scope = token.get("scope", previous.scope if previous else "")
        if isinstance(scope, (list, tuple)):
            scope = " ".join(scope)

        return cls(
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token")
            or (previous.refresh_token if previous else ""),
            expires_at=expires_at,
            scope=scope,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresAt": self.expires_at,
            "scope": self.scope,
        }

    def expires_within(self, seconds: int) -> bool:
        """Check whether the access token expires within the given window."""
        return self.expires_at - time.time() <= seconds


class FileTokenStorage:
    """
    JSON file storage for OAuth tokens.

    The file is written with 0600 permissions. Refresh tokens are stored in
    plain text; encrypt them at rest in a real deployment.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> Optional[StoredTokens]:
        """Load tokens, or None if missing or unreadable."""
        if not self.path.exists():
            logger.debug(f"No token file found at {self.path}")
            return None

        try:
            return StoredTokens.from_dict(json.loads(self.path.read_text()))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Invalid token file {self.path}: {e}")
            return None

    def save(self, tokens: StoredTokens) -> None:
        """Write tokens with owner-only permissions."""
        self.path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        self.path.write_text(json.dumps(tokens.to_dict(), indent=2))
        self.path.chmod(0o600)
        logger.debug(f"Saved tokens to {self.path}")

    def clear(self) -> bool:
        """
        Remove stored tokens.

        Returns:
            True if tokens were removed, False if none were stored
        """
        if self.path.exists():
            self.path.unlink()
            return True
        return False


class DoorFlowAuth:
    """
    OAuth2 connection manager for DoorFlow.

    Handles the authorization-code flow, token refresh and disconnect.
    Construct once and hand it to DoorFlowAPI, which calls
    get_access_token() before each request.

    Usage:
        auth = DoorFlowAuth(client_id, client_secret, storage=FileTokenStorage(p))

        url, state = auth.get_authorization_url()
        # ... user approves, DoorFlow redirects with ?code=...&state=...
        auth.handle_callback(code, state, expected_state=state)

        token = auth.get_access_token()
    """

    def __init__(
        self,
        client_id: str,
        client_secret: Optional[str],
        storage: FileTokenStorage,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        scopes: Optional[list[str]] = None,
        base_url: str = DEFAULT_BASE_URL,
        auth_timeout: int = DEFAULT_AUTH_TIMEOUT,
    ):
        """
        Initialize the authentication manager.

        Args:
            client_id: OAuth client id of the DoorFlow application
            client_secret: OAuth client secret
            storage: Token storage
            redirect_uri: Redirect URI registered with DoorFlow
            scopes: Scopes to request (default: SCOPES)
            base_url: DoorFlow host serving the /oauth endpoints
            auth_timeout: Timeout in seconds for token requests
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.storage = storage
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes or SCOPES)
        self.base_url = base_url.rstrip("/")
        self.auth_timeout = auth_timeout

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    def _session(self, **kwargs: Any) -> OAuth2Session:
        return OAuth2Session(
            self.client_id,
            redirect_uri=self.redirect_uri,
            scope=self.scopes,
            **kwargs,
        )

    def get_authorization_url(self) -> tuple[str, str]:
        """
        Build the DoorFlow authorization URL.

        Returns:
            Tuple of (url, state); keep the state to verify the callback
        """
        url, state = self._session().authorization_url(
            f"{self.base_url}{AUTHORIZE_PATH}"
        )
        logger.info("Starting DoorFlow authorization flow")
        return url, state

    def handle_callback(
        self, code: str, state: Optional[str], expected_state: Optional[str]
    ) -> StoredTokens:
        """
        Exchange an authorization code for tokens and store them.

        Args:
            code: Authorization code from the redirect
            state: State returned in the redirect
            expected_state: State issued by get_authorization_url()

        Returns:
            The stored tokens

        Raises:
            AuthenticationError: On state mismatch or failed token exchange
        """
        if not code:
            raise AuthenticationError("Missing authorization code.")
        if expected_state is not None and state != expected_state:
            raise AuthenticationError(
                "OAuth state mismatch. The authorization request may have been "
                "tampered with; start the flow again."
            )

        try:
            token = self._session(state=state).fetch_token(
                self.token_url,
                code=code,
                client_secret=self.client_secret,
                include_client_id=True,
                timeout=self.auth_timeout,
            )
        except (OAuth2Error, RequestException) as e:
            logger.error(f"Token exchange failed: {e}")
            raise AuthenticationError(f"Token exchange failed: {e}") from e

        tokens = StoredTokens.from_oauth_response(token)
        self.storage.save(tokens)
        logger.info("Connected to DoorFlow")
        return tokens

    def handle_redirect(
        self, redirect_url: str, expected_state: Optional[str]
    ) -> StoredTokens:
        """
        Complete the flow from the full redirect URL.

        Raises:
            AuthenticationError: If DoorFlow returned an error or the URL
                                 carries no code
        """
        query = parse_qs(urlparse(redirect_url).query)
        if "error" in query:
            description = query.get("error_description", [""])[0]
            raise AuthenticationError(
                f"DoorFlow returned an error: {query['error'][0]} {description}".strip()
            )
        code = query.get("code", [""])[0]
        state = query.get("state", [None])[0]
        return self.handle_callback(code, state, expected_state)

    def refresh_access_token(self) -> StoredTokens:
        """
        Force a token refresh and store the rotated tokens.

        Raises:
            AuthenticationError: If not connected or the refresh fails
        """
        tokens = self.storage.load()
        if tokens is None or not tokens.refresh_token:
            raise AuthenticationError("Not connected to DoorFlow.")

        try:
            token = OAuth2Session(self.client_id).refresh_token(
                self.token_url,
                refresh_token=tokens.refresh_token,
                client_id=self.client_id,
                client_secret=self.client_secret,
                timeout=self.auth_timeout,
            )
        except (OAuth2Error, RequestException) as e:
            logger.warning(f"Failed to refresh DoorFlow token: {e}")
            raise AuthenticationError(f"Token refresh failed: {e}") from e

        refreshed = StoredTokens.from_oauth_response(token, previous=tokens)
        self.storage.save(refreshed)
        logger.debug("Refreshed DoorFlow access token")
        return refreshed

    def get_access_token(self) -> Optional[str]:
        """
        Get a valid access token, refreshing it when close to expiry.

        Returns:
            Access token, or None if not connected or the refresh failed
        """
        tokens = self.storage.load()
        if tokens is None:
            return None

        if not tokens.expires_within(REFRESH_BUFFER_SECONDS):
            return tokens.access_token

        try:
            return self.refresh_access_token().access_token
        except AuthenticationError:
            return None

    def is_authenticated(self) -> bool:
        """Check if a valid (or refreshable) access token exists."""
        return self.get_access_token() is not None

    def get_token_info(self) -> Optional[dict[str, Any]]:
        """
        Token metadata for display, without the secrets.

        Returns:
            Dictionary with expires_at and scope, or None if not connected
        """
        tokens = self.storage.load()
        if tokens is None:
            return None
        return {"expires_at": tokens.expires_at, "scope": tokens.scope}

    def disconnect(self) -> bool:
        """
        Revoke tokens (best-effort) and clear storage.

        Returns:
            True if stored tokens were removed
        """
        tokens = self.storage.load()
        if tokens is not None:
            try:
                response = requests.post(
                    f"{self.base_url}{REVOKE_PATH}",
                    data={
                        "token": tokens.refresh_token or tokens.access_token,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                    },
                    timeout=self.auth_timeout,
                )
                if not response.ok:
                    logger.warning(
                        f"Token revocation returned status {response.status_code}"
                    )
            except RequestException as e:
                logger.warning(f"Token revocation failed: {e}")

        cleared = self.storage.clear()
        if cleared:
            logger.info("Disconnected from DoorFlow")
        return cleared

    def get_auth_status(self, missing_config: Optional[list[str]] = None) -> dict[str, Any]:
        """
        Connection status for display.

        Args:
            missing_config: Names of required settings that are not configured

        Returns:
            Dictionary with connected, configured, expires_at, scope and
            missing_config entries
        """
        missing = list(missing_config or [])
        status: dict[str, Any] = {
            "configured": not missing,
            "connected": False,
            "token_path": str(self.storage.path),
        }
        if missing:
            status["missing_config"] = missing
            return status

        status["connected"] = self.is_authenticated()
        if status["connected"]:
            info = self.get_token_info() or {}
            status.update(info)
        return status
