"""Account helpers: login with a ticket, account info and the root folder."""

import logging
from typing import Any, Optional

from .api import BoxClient
from .config import config
from .exceptions import BoxAPIError, BoxProtocolError
from .folder import Folder

logger = logging.getLogger(__name__)

ROOT_FOLDER_ID = "0"


class Account:
    """The logged in Box account.

    Login follows the ticket flow: request a ticket, send the user to the
    authorization page, then exchange the ticket for an auth token.
    """

    def __init__(self, client: BoxClient):
        """Initialize the account.

        Args:
            client: Box API client
        """
        self.client = client
        self._user: Optional[dict[str, Any]] = None

    @property
    def authorized(self) -> bool:
        """Whether the client holds an auth token."""
        return self.client.auth_token is not None

    def ticket(self) -> str:
        """Request a new login ticket."""
        response = self.client.get_ticket()
        ticket = response.get("ticket")
        if not ticket:
            raise BoxProtocolError("Ticket response has no 'ticket'")
        return ticket

    def authorize_url(self, ticket: str) -> str:
        """URL where the user grants access for a ticket."""
        return f"{self.client.old_url}/auth/{ticket}"

    def authorize(self, ticket: str, save: bool = False) -> str:
        """Exchange an authorized ticket for an auth token.

        Args:
            ticket: Ticket the user has granted access for
            save: Also store the token in the config file

        Returns:
            The auth token (also set on the client)
        """
        response = self.client.get_auth_token(ticket)
        auth_token = response.get("auth_token")
        if not auth_token:
            raise BoxProtocolError("Auth token response has no 'auth_token'")

        self.client.set_auth_token(auth_token)
        self._user = response.get("user")
        if save:
            config.save_auth_token(auth_token)
        logger.info("Authorized Box account")
        return auth_token

    def logout(self, forget: bool = False) -> None:
        """End the session.

        Args:
            forget: Also remove the stored token from the config file
        """
        self.client.logout()
        self._user = None
        if forget:
            config.save_auth_token(None)

    def register(self, email: str, password: str) -> dict[str, Any]:
        """Register a new user and log in as that user.

        Returns:
            The new user's info
        """
        response = self.client.register_new_user(email, password)
        token = response.get("token") or response.get("auth_token")
        if token:
            self.client.set_auth_token(token)
        self._user = response.get("user")
        return self._user or {}

    def available(self, email: str) -> bool:
        """Check whether an email address can still be registered."""
        try:
            self.client.verify_registration_email(email)
        except BoxAPIError as e:
            if e.code == "email_already_registered":
                return False
            raise
        return True

    def info(self, refresh: bool = False) -> dict[str, Any]:
        """Get the account's user info.

        Args:
            refresh: Ask the server even if the info is cached

        Returns:
            User info (login, email, space_amount, space_used, ...)
        """
        if self._user is None or refresh:
            response = self.client.get_account_info()
            user = response.get("user")
            if not isinstance(user, dict):
                raise BoxProtocolError("Account info response has no 'user'")
            self._user = user
        return self._user

    def root(self) -> Folder:
        """Get the root folder of the account. Performs no network I/O."""
        return Folder(self.client, {"type": "folder", "id": ROOT_FOLDER_ID})
