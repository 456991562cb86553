"""
CrownSync - Cloud Backend API Module

Handles all communication with the team backend that fronts the shared
object store. Manages authentication, bearer tokens and file requests.

Author: CrownSync Project
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any

import requests

from crownsync.exceptions import CrownSyncAuthError, CrownSyncTransportError
from crownsync.gateways import RemoteObjectStoreGateway
from crownsync.models.remote import RemoteObjectDescriptor, RemoteFileListing
from crownsync.remote_paths import DEFAULT_ROOT_PREFIX, normalize_key

# Configure logging
logger = logging.getLogger(__name__)

# Roles allowed to modify the shared library
WRITE_ROLES = ("admin_org", "org_admin", "coach")

# Extensions the backend is ever asked to delete
DELETABLE_EXTENSIONS = (".mp4", ".jpg", ".jpeg", ".png", ".json", ".crown", ".mov", ".avi", ".webm")


def is_org_write_role(role: Optional[str]) -> bool:
    """True if the role may delete or overwrite shared library objects."""
    return (role or "").strip().lower() in WRITE_ROLES


def parse_timestamp(value: Any) -> int:
    """
    Convert a listing timestamp to epoch seconds.

    Accepts ISO 8601 strings (with or without "Z") and numbers.

    Args:
        value: Raw lastModified value

    Returns:
        Epoch seconds (0 when missing or unreadable)
    """
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return int(value)

    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        logger.warning(f"Unreadable timestamp in listing: {value}")
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


class CloudBackendAPI(RemoteObjectStoreGateway):
    """
    API client for the team backend.

    Responsibilities:
    - Authenticate with the backend (login)
    - Store and manage the bearer token
    - List, sign and delete objects in the shared store
    - Map transport failures onto CrownSync exceptions
    """

    def __init__(self, base_url: str, verify_ssl: bool = True, timeout: int = 30,
                 root_prefix: str = DEFAULT_ROOT_PREFIX):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the backend API (e.g., "https://api.example.com/v1")
            verify_ssl: Whether to verify SSL certificates
            timeout: Request timeout in seconds
            root_prefix: Historical team root prefix stripped from listed keys
        """
        self.base_url = base_url.rstrip("/")
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.root_prefix = root_prefix
        self.token: Optional[str] = None
        self.token_expires_at: Optional[float] = None
        self.user_name: Optional[str] = None
        self.team_name: Optional[str] = None
        self.current_user_role: Optional[str] = None
        # Use session for connection pooling
        self.session = requests.Session()
        logger.debug(f"Initialized API client for {self.base_url} (SSL verification: {self.verify_ssl})")

    def close(self):
        """
        Close the session and release resources.

        Should be called when done using the API client.
        """
        if hasattr(self, 'session') and self.session:
            self.session.close()
            logger.debug("API client session closed")

    def __del__(self):
        """Cleanup on deletion."""
        self.close()

    @property
    def is_authenticated(self) -> bool:
        if not self.token:
            return False
        if self.token_expires_at is not None and self.token_expires_at <= time.time():
            return False
        return True

    @property
    def can_write_remote_library(self) -> bool:
        return self.is_authenticated and is_org_write_role(self.current_user_role)

    def login(self, email: str, password: str) -> bool:
        """
        Authenticate with the backend and receive a bearer token.

        Args:
            email: User's email
            password: User's password

        Returns:
            True if authentication successful

        Raises:
            CrownSyncAuthError: If authentication fails
            CrownSyncTransportError: If the backend cannot be reached or errors
        """
        logger.info(f"Attempting login for user: {email}")
        url = f"{self.base_url}/auth/login"
        payload = {
            "email": email,
            "password": password
        }

        try:
            response = self.session.post(
                url,
                json=payload,
                verify=self.verify_ssl,
                timeout=self.timeout
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot connect to backend at {self.base_url}: {e}")
            raise CrownSyncTransportError(f"Cannot connect to backend at {self.base_url}")
        except requests.exceptions.Timeout:
            raise CrownSyncTransportError("Connection to backend timed out")
        except requests.exceptions.RequestException as e:
            raise CrownSyncTransportError(f"Request error: {str(e)}")

        if response.status_code in (401, 403):
            logger.warning(f"Login failed for user {email}: Invalid credentials")
            raise CrownSyncAuthError("Invalid email or password")
        if response.status_code != 200:
            logger.error(f"Login failed with status {response.status_code}: {response.text}")
            raise CrownSyncTransportError(f"Login failed with status {response.status_code}: {response.text}")

        data = response.json()
        self.token = data.get("accessToken") or data.get("token")
        if not self.token:
            raise CrownSyncAuthError("Login response did not include a token")

        expires_in = data.get("expiresIn") or data.get("expires_in")
        self.token_expires_at = time.time() + int(expires_in) if expires_in else None

        user = data.get("user") or {}
        self.user_name = user.get("name")
        self.team_name = user.get("teamName")
        self.current_user_role = user.get("role") or data.get("role")
        logger.info(f"Login successful for user: {email} (role: {self.current_user_role})")
        return True

    def logout(self):
        """Forget the current token."""
        self.token = None
        self.token_expires_at = None
        self.current_user_role = None
        logger.info("Logged out")

    def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (e.g., "/files/list")
            **kwargs: Additional arguments for request

        Returns:
            Response data (parsed JSON or raw data)

        Raises:
            CrownSyncAuthError: If authentication fails (token invalid/expired)
            CrownSyncTransportError: If the request fails
        """
        if not self.is_authenticated:
            logger.error("Attempted API request without authentication")
            raise CrownSyncAuthError("Not authenticated - call login() first")

        url = f"{self.base_url}{endpoint}"
        logger.debug(f"API request: {method} {endpoint}")

        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self.token}"

        if "verify" not in kwargs:
            kwargs["verify"] = self.verify_ssl
        if "timeout" not in kwargs:
            kwargs["timeout"] = self.timeout

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot connect to backend at {self.base_url}: {e}")
            raise CrownSyncTransportError(f"Cannot connect to backend at {self.base_url}")
        except requests.exceptions.Timeout:
            logger.error("Request timed out")
            raise CrownSyncTransportError("Request timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {str(e)}")
            raise CrownSyncTransportError(f"Request error: {str(e)}")

        if response.status_code == 401:
            # Token expired or invalid
            self.token = None
            logger.warning("Authentication token expired or invalid")
            raise CrownSyncAuthError("Authentication token expired or invalid - please login again")

        if response.status_code >= 400:
            error_message = response.text
            try:
                error_data = response.json()
                error_message = error_data.get("error") or error_data.get("message") or error_message
            except (json.JSONDecodeError, ValueError, AttributeError):
                pass
            logger.error(f"Request failed with status {response.status_code}: {error_message}")
            raise CrownSyncTransportError(f"Request failed with status {response.status_code}: {error_message}")

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            return response.content

    # ==================== File Operations ====================

    def list_files(self, prefix: str, max_items: int = 1000,
                   continuation_token: Optional[str] = None) -> RemoteFileListing:
        """
        List one page of objects under a prefix.

        Args:
            prefix: Key prefix relative to the team root
            max_items: Maximum objects in this page
            continuation_token: Token from the previous page

        Returns:
            RemoteFileListing for this page

        Raises:
            CrownSyncAuthError: If not authenticated
            CrownSyncTransportError: If the request fails or the response is unreadable
        """
        params: Dict[str, Any] = {"path": prefix, "max": max_items}
        if continuation_token:
            params["token"] = continuation_token

        data = self._make_request("GET", "/files/list", params=params)
        if not isinstance(data, dict):
            raise CrownSyncTransportError("Invalid listing response")

        files = []
        for item in data.get("files") or []:
            key = item.get("key") or item.get("fullKey") or ""
            if not key:
                continue
            files.append(RemoteObjectDescriptor(
                key=normalize_key(key, self.root_prefix),
                is_folder=bool(item.get("isFolder", key.endswith("/"))),
                size=int(item.get("size") or 0),
                last_modified_utc=parse_timestamp(item.get("lastModified")),
                content_type=item.get("contentType"),
            ))

        has_more = bool(data.get("hasMore", data.get("isTruncated", False)))
        token = data.get("continuationToken")
        logger.debug(f"Listed {len(files)} objects under '{prefix}' (has_more={has_more})")
        return RemoteFileListing(files=files, continuation_token=token, has_more=has_more)

    def get_signed_download_url(self, key: str, expiration_minutes: int = 60) -> str:
        """
        Request a presigned download URL.

        Args:
            key: Object key relative to the team root
            expiration_minutes: Lifetime of the URL

        Returns:
            Signed URL

        Raises:
            CrownSyncTransportError: If the backend returns no URL
        """
        payload = {"path": key, "expirationMinutes": expiration_minutes}
        data = self._make_request("POST", "/files/download-url", json=payload)
        url = data.get("url") or data.get("downloadUrl") if isinstance(data, dict) else None
        if not url:
            raise CrownSyncTransportError(f"No download URL returned for {key}")
        return url

    def delete_file(self, key: str) -> bool:
        """
        Delete one object from the shared store.

        Keys that are blank, lack a media extension or are not at least
        three segments deep are refused without contacting the backend.

        Args:
            key: Object key relative to the team root

        Returns:
            True if the backend confirmed the deletion

        Raises:
            CrownSyncAuthError: If not authenticated
        """
        if not key or not key.strip():
            logger.warning("Refusing to delete: empty key")
            return False

        if not key.lower().endswith(DELETABLE_EXTENSIONS):
            logger.warning(f"Refusing to delete key without a media extension: {key}")
            return False

        if len([part for part in key.split("/") if part]) < 3:
            logger.warning(f"Refusing to delete key without folder structure: {key}")
            return False

        try:
            self._make_request("POST", "/files/delete", json={"path": key})
        except CrownSyncTransportError as e:
            logger.warning(f"Failed to delete {key}: {e}")
            return False

        logger.info(f"Deleted remote object: {key}")
        return True
