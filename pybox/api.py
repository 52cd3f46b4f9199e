"""API client for Box."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Literal

import httpx

from .config import config
from .exceptions import (
    BoxAPIError,
    BoxAuthenticationError,
    BoxConfigError,
    BoxDownloadError,
    BoxNetworkError,
    BoxPermissionError,
    BoxProtocolError,
    BoxRateLimitError,
    BoxResourceNotFoundError,
    BoxUploadError,
)
from .utils import Content, read_content, xml_to_dict

logger = logging.getLogger(__name__)

ItemKind = Literal["file", "folder", "comment", "discussion"]
UploadMode = Literal["new", "overwrite", "copy"]

# URL collection for each addressable item kind
COLLECTIONS: dict[str, str] = {
    "file": "files",
    "folder": "folders",
    "comment": "comments",
    "discussion": "discussions",
}

# v1 statuses meaning the session is missing or invalid
V1_AUTH_FAILURES: frozenset[str] = frozenset(
    {
        "not_logged_in",
        "application_restricted",
        "wrong_auth_token",
        "wrong_input",
    }
)


class BoxClient:
    """Client for interacting with the Box API.

    Account and ticket operations go through the v1 REST endpoint, which
    answers in XML. Item operations use the v2 JSON endpoint and require an
    auth token. Uploads go to a separate upload host.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        upload_url: str | None = None,
        auth_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Box API client.

        Args:
            api_key: Optional API key (uses config if not provided)
            api_url: Optional base URL of the API host (uses config if not provided)
            upload_url: Optional base URL of the upload host (uses config if not
                        provided)
            auth_token: Optional session token (uses config if not provided)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.api_key = api_key or config.api_key
        if not self.api_key:
            raise BoxConfigError(
                "API key not configured. Please set BOX_API_KEY environment variable."
            )

        url = (api_url or config.api_url).rstrip("/")
        upload = (upload_url or config.upload_url).rstrip("/")
        self.base_url = f"{url}/api/2.0"
        self.old_url = f"{url}/api/1.0"
        self.upload_url = f"{upload}/api/2.0"
        self.timeout = timeout

        self._transport = transport
        self._client: httpx.Client | None = None
        self._auth_token: str | None = None
        self.set_auth_token(auth_token or config.auth_token)

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> BoxClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================
    # Session state
    # =========================

    @property
    def auth_token(self) -> str | None:
        """The current session token, or None when not logged in."""
        return self._auth_token

    def set_auth_token(self, auth_token: str | None) -> None:
        """Add the auth token to every request (or remove it when None).

        Args:
            auth_token: The auth token to use
        """
        self._auth_token = auth_token or None

    @property
    def authorization_header(self) -> str:
        """Value of the Authorization header sent with v2 requests."""
        if self._auth_token:
            return f"BoxAuth api_key={self.api_key}&auth_token={self._auth_token}"
        return f"BoxAuth api_key={self.api_key}"

    def _require_auth(self) -> None:
        if not self._auth_token:
            raise BoxAuthenticationError(
                "Not authenticated - set an auth token before calling the API"
            )

    # =========================
    # Request plumbing
    # =========================

    def _map_http_error(
        self,
        response: httpx.Response,
        error_class: type[BoxAPIError] = BoxAPIError,
    ) -> BoxAPIError:
        """Map an unsuccessful HTTP response to a pybox exception.

        Args:
            response: The failed response
            error_class: Exception class used for statuses without a
                         dedicated mapping

        Returns:
            The exception to raise
        """
        status_code = response.status_code
        code = None
        message = None

        # Box reports errors as {"type": "error", "code": ..., "message": ...}
        try:
            if response.content:
                error_data = response.json()
                if isinstance(error_data, dict):
                    code = error_data.get("code")
                    message = error_data.get("message") or error_data.get("error")
        except ValueError:
            pass

        if status_code == 401:
            return BoxAuthenticationError(
                message or "Invalid auth token or unauthorized access",
                status_code=status_code,
                code=code,
            )
        if status_code == 403:
            return BoxPermissionError(
                message or "Access forbidden - check your permissions",
                status_code=status_code,
                code=code,
            )
        if status_code == 404:
            return BoxResourceNotFoundError(
                message or "Resource not found", status_code=status_code, code=code
            )
        if status_code == 429:
            return BoxRateLimitError(
                message or "Rate limit exceeded - please try again later",
                status_code=status_code,
                code=code,
            )

        error_msg = f"API request failed with status {status_code}"
        if message:
            error_msg = f"{error_msg}: {message}"
        return error_class(error_msg, status_code=status_code, code=code)

    def _send(
        self,
        method: str,
        url: str,
        authenticated: bool = True,
        error_class: type[BoxAPIError] = BoxAPIError,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Raises:
            BoxAuthenticationError: If authentication is required but no
                                    token is set
            BoxNetworkError: If the server could not be reached
            BoxAPIError: If the server answered with an error status
        """
        headers = {"Authorization": self.authorization_header}
        if authenticated:
            self._require_auth()

        logger.debug(f"{method} {url}")
        try:
            response = self._get_client().request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._map_http_error(e.response, error_class) from e
        except httpx.RequestError as e:
            raise BoxNetworkError(f"Network error: {e}") from e

        return response

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        """Parse a JSON object from a successful response."""
        if not response.content:
            return {}

        content_type = response.headers.get("Content-Type", "")
        if "json" not in content_type:
            # An HTML page usually means the login was rejected
            if "text/html" in content_type:
                raise BoxAuthenticationError(
                    "Invalid API key - server returned HTML instead of JSON"
                )
            raise BoxProtocolError(f"Unexpected response type: {content_type}")

        try:
            data = response.json()
        except ValueError as e:
            raise BoxProtocolError("Invalid JSON response from server") from e

        if not isinstance(data, dict):
            raise BoxProtocolError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        return data

    def _request(self, method: str, *path: Any, **kwargs: Any) -> dict[str, Any]:
        """Make an authenticated v2 API request.

        Args:
            method: HTTP method
            *path: URL path segments below the v2 base url
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data
        """
        url = "/".join([self.base_url, *map(str, path)])
        response = self._send(method, url, **kwargs)
        return self._parse_json(response)

    def _request_v1(self, action: str, expected: str, **params: Any) -> dict[str, Any]:
        """Make a request to the v1 REST endpoint and parse its XML answer.

        Args:
            action: The v1 action name
            expected: The status the server sends on success
            **params: Additional query parameters

        Returns:
            The children of the <response> element as a dict

        Raises:
            BoxProtocolError: If the answer is not a well-formed <response>
            BoxAuthenticationError: If the server rejects the session
            BoxAPIError: If the server answers with any other status
        """
        query: dict[str, Any] = {"action": action, "api_key": self.api_key}
        if self._auth_token:
            query["auth_token"] = self._auth_token
        query.update(params)

        url = f"{self.old_url}/rest"
        response = self._send("GET", url, authenticated=False, params=query)

        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as e:
            raise BoxProtocolError(f"Invalid XML response for action '{action}'") from e

        if root.tag != "response":
            raise BoxProtocolError(f"Unexpected XML root element <{root.tag}>")

        data = xml_to_dict(root)
        if not isinstance(data, dict) or not data.get("status"):
            raise BoxProtocolError(f"Response for action '{action}' has no status")

        status = data["status"]
        if status != expected:
            if status in V1_AUTH_FAILURES:
                raise BoxAuthenticationError(
                    f"Action '{action}' rejected: {status}", code=status
                )
            raise BoxAPIError(f"Action '{action}' failed: {status}", code=status)
        return data

    @staticmethod
    def _collection(response: dict[str, Any], key: str) -> list[Any]:
        """Extract a list of fragments from a collection response.

        Accepts either the named key or the generic ``entries`` key.
        """
        if key in response:
            value = response[key]
        elif "entries" in response:
            value = response["entries"]
        else:
            raise BoxProtocolError(f"Response is missing the '{key}' collection")

        if not isinstance(value, list):
            raise BoxProtocolError(f"Collection '{key}' is not a list")
        return value

    @staticmethod
    def _single_entry(response: dict[str, Any]) -> dict[str, Any]:
        """Extract the item fragment from a response that may wrap it in entries."""
        if "entries" not in response:
            return response

        entries = response["entries"]
        if not isinstance(entries, list) or not entries:
            raise BoxProtocolError("Response 'entries' is empty")
        if not isinstance(entries[0], dict):
            raise BoxProtocolError("Response entry is not an object")
        return entries[0]

    @staticmethod
    def _collection_for(kind: str) -> str:
        try:
            return COLLECTIONS[kind]
        except KeyError:
            raise ValueError(f"Unsupported item kind: {kind}") from None

    # =========================
    # Authentication Operations
    # =========================

    def get_ticket(self) -> dict[str, Any]:
        """Request a ticket for authorization.

        Returns:
            Response with 'status' and 'ticket' keys
        """
        return self._request_v1("get_ticket", "get_ticket_ok")

    def get_auth_token(self, ticket: str) -> dict[str, Any]:
        """Request an auth token given an authorized ticket.

        Args:
            ticket: The ticket to exchange

        Returns:
            Response with 'status', 'auth_token' and 'user' keys
        """
        return self._request_v1("get_auth_token", "get_auth_token_ok", ticket=ticket)

    def logout(self) -> dict[str, Any]:
        """Request that the session be logged out and forget the token."""
        result = self._request_v1("logout", "logout_ok")
        self.set_auth_token(None)
        return result

    def register_new_user(self, email: str, password: str) -> dict[str, Any]:
        """Register a new user.

        Returns:
            Response with 'status', 'token' and 'user' keys
        """
        return self._request_v1(
            "register_new_user", "successful_register", login=email, password=password
        )

    def verify_registration_email(self, email: str) -> dict[str, Any]:
        """Check whether an email address can be used for registration."""
        return self._request_v1("verify_registration_email", "email_ok", login=email)

    def get_account_info(self) -> dict[str, Any]:
        """Get the logged in user's account info.

        Returns:
            Response with 'status' and 'user' keys
        """
        return self._request_v1("get_account_info", "get_account_info_ok")

    # =========================
    # Item Operations
    # =========================

    def fetch_attributes(self, kind: ItemKind, item_id: str) -> dict[str, Any]:
        """Get the full info of an item.

        Args:
            kind: Item kind ("file", "folder", "comment" or "discussion")
            item_id: ID of the item

        Returns:
            Attribute fragment of the item
        """
        return self._request("GET", self._collection_for(kind), item_id)

    def update_attributes(
        self, kind: ItemKind, item_id: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """Update an item's attributes (name, description, parent, ...).

        Returns:
            Attribute fragment of the updated item
        """
        return self._request("PUT", self._collection_for(kind), item_id, json=params)

    def delete_item(self, kind: ItemKind, item_id: str) -> dict[str, Any]:
        """Delete (trash) an item.

        Returns:
            Attribute fragment describing the deleted item (may be empty)
        """
        return self._request("DELETE", self._collection_for(kind), item_id)

    # =========================
    # Folder Operations
    # =========================

    def list_children(self, folder_id: str) -> list[dict[str, Any]]:
        """List the files and folders directly inside a folder.

        Returns:
            List of child attribute fragments, in server order
        """
        response = self._request("GET", "folders", folder_id, "items")
        return self._collection(response, "entries")

    def create_folder(self, parent_id: str, name: str) -> dict[str, Any]:
        """Create a new folder.

        Args:
            parent_id: ID of the parent folder
            name: Name of the new folder

        Returns:
            Attribute fragment of the new folder
        """
        data = {"name": name, "parent": {"id": parent_id}}
        return self._request("POST", "folders", json=data)

    def create_discussion(self, folder_id: str, params: dict[str, Any]) -> dict[str, Any]:
        """Create a discussion attached to a folder.

        Args:
            folder_id: ID of the folder
            params: Discussion fields (name, description)

        Returns:
            Attribute fragment of the new discussion
        """
        data = {"parent": {"id": folder_id}, **params}
        return self._request("POST", "discussions", json=data)

    def list_discussions(self, folder_id: str) -> list[dict[str, Any]]:
        """List the discussions of a folder."""
        response = self._request("GET", "folders", folder_id, "discussions")
        return self._collection(response, "discussions")

    # =========================
    # Comment Operations
    # =========================

    def list_comments(self, kind: ItemKind, item_id: str) -> list[dict[str, Any]]:
        """List the comments of a file or discussion, in server order."""
        response = self._request("GET", self._collection_for(kind), item_id, "comments")
        return self._collection(response, "comments")

    def add_comment(self, kind: ItemKind, item_id: str, message: str) -> dict[str, Any]:
        """Add a comment to a file or discussion.

        Returns:
            Attribute fragment of the new comment
        """
        return self._request(
            "POST",
            self._collection_for(kind),
            item_id,
            "comments",
            json={"message": message},
        )

    # =========================
    # Version Operations
    # =========================

    def list_versions(self, file_id: str) -> list[dict[str, Any]]:
        """List the versions of a file, in server order."""
        response = self._request("GET", "files", file_id, "versions")
        return self._collection(response, "versions")

    def fetch_version(self, file_id: str, version_id: str) -> dict[str, Any]:
        """Get the info of a single file version."""
        return self._request("GET", "files", file_id, "versions", version_id)

    def update_version(
        self, file_id: str, version_id: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """Update a file version's attributes.

        Returns:
            Attribute fragment of the updated version
        """
        return self._request(
            "PUT", "files", file_id, "versions", version_id, json=params
        )

    def delete_version(self, file_id: str, version_id: str) -> dict[str, Any]:
        """Delete a file version.

        Returns:
            Attribute fragment describing the deleted version (may be empty)
        """
        return self._request("DELETE", "files", file_id, "versions", version_id)

    # =========================
    # Content Transfer
    # =========================

    def download_content(self, file_id: str, version_id: str | None = None) -> bytes:
        """Download the content of a file (or of one of its versions).

        Args:
            file_id: ID of the file
            version_id: Optional version to download instead of the current one

        Returns:
            File content as bytes

        Raises:
            BoxDownloadError: If the download fails
        """
        url = f"{self.base_url}/files/{file_id}/data"
        params = {"version": version_id} if version_id else None
        response = self._send("GET", url, error_class=BoxDownloadError, params=params)
        return response.content

    def upload_content(
        self,
        target_id: str,
        content: Content,
        mode: UploadMode = "new",
        destination_id: str | None = None,
        name: str | None = None,
    ) -> dict[str, Any]:
        """Upload file content.

        Args:
            target_id: Folder ID for mode "new", file ID otherwise
            content: Bytes, a local path, or a binary file object
            mode: "new" (create in folder), "overwrite" (new version of the
                  file) or "copy" (new copy of the file)
            destination_id: Destination folder for mode "copy"
            name: Optional file name (defaults to the content's name)

        Returns:
            Attribute fragment of the uploaded file

        Raises:
            BoxUploadError: If the upload fails
        """
        file_name, data = read_content(content, name)
        form: dict[str, Any] = {}

        if mode == "new":
            url = f"{self.upload_url}/files/data"
            form["folder_id"] = target_id
        elif mode == "overwrite":
            url = f"{self.upload_url}/files/{target_id}/data"
        elif mode == "copy":
            url = f"{self.upload_url}/files/{target_id}/copy"
            if destination_id is not None:
                form["parent_id"] = destination_id
        else:
            raise ValueError(f"Unsupported upload mode: {mode}")

        logger.debug(f"Uploading {file_name} ({len(data)} bytes, mode={mode})")
        response = self._send(
            "POST",
            url,
            error_class=BoxUploadError,
            data=form,
            files={"file": (file_name, data)},
        )
        return self._single_entry(self._parse_json(response))

    # =========================
    # Events
    # =========================

    def get_events(self) -> dict[str, Any]:
        """Get the event stream of the current user."""
        return self._request("GET", "events")
