"""Unit tests for account helpers."""

from unittest.mock import Mock, patch

import pytest

from pybox.account import Account
from pybox.exceptions import BoxAPIError, BoxProtocolError
from pybox.folder import Folder


class TestLogin:
    """Tests for the ticket login flow."""

    def test_ticket(self):
        """Test requesting a ticket."""
        mock_client = Mock()
        mock_client.get_ticket.return_value = {"status": "get_ticket_ok", "ticket": "t"}

        assert Account(mock_client).ticket() == "t"

    def test_ticket_missing(self):
        """Test a ticket response without a ticket."""
        mock_client = Mock()
        mock_client.get_ticket.return_value = {"status": "get_ticket_ok"}

        with pytest.raises(BoxProtocolError):
            Account(mock_client).ticket()

    def test_authorize_url(self):
        """Test the authorization page URL."""
        mock_client = Mock()
        mock_client.old_url = "https://www.box.com/api/1.0"

        url = Account(mock_client).authorize_url("t")

        assert url == "https://www.box.com/api/1.0/auth/t"

    def test_authorize_sets_token(self):
        """Test exchanging a ticket sets the client's token."""
        mock_client = Mock()
        mock_client.get_auth_token.return_value = {
            "status": "get_auth_token_ok",
            "auth_token": "tok",
            "user": {"login": "me@example.com"},
        }
        account = Account(mock_client)

        with patch("pybox.account.config") as mock_config:
            token = account.authorize("t")
            mock_config.save_auth_token.assert_not_called()

        assert token == "tok"
        mock_client.set_auth_token.assert_called_once_with("tok")
        assert account.info() == {"login": "me@example.com"}
        mock_client.get_account_info.assert_not_called()

    def test_authorize_and_save(self):
        """Test the token can be stored in the config."""
        mock_client = Mock()
        mock_client.get_auth_token.return_value = {"auth_token": "tok"}

        with patch("pybox.account.config") as mock_config:
            Account(mock_client).authorize("t", save=True)

        mock_config.save_auth_token.assert_called_once_with("tok")

    def test_logout_forget(self):
        """Test logging out and removing the stored token."""
        mock_client = Mock()

        with patch("pybox.account.config") as mock_config:
            Account(mock_client).logout(forget=True)

        mock_client.logout.assert_called_once()
        mock_config.save_auth_token.assert_called_once_with(None)

    def test_authorized(self):
        """Test authorized reflects the client's token."""
        mock_client = Mock()
        mock_client.auth_token = None
        account = Account(mock_client)
        assert account.authorized is False

        mock_client.auth_token = "tok"
        assert account.authorized is True


class TestRegistration:
    """Tests for registration helpers."""

    def test_register_sets_token(self):
        """Test registering logs in as the new user."""
        mock_client = Mock()
        mock_client.register_new_user.return_value = {
            "status": "successful_register",
            "token": "tok",
            "user": {"login": "new@example.com"},
        }

        user = Account(mock_client).register("new@example.com", "secret")

        mock_client.set_auth_token.assert_called_once_with("tok")
        assert user == {"login": "new@example.com"}

    def test_available(self):
        """Test an unregistered address is available."""
        mock_client = Mock()

        assert Account(mock_client).available("new@example.com") is True

    def test_not_available(self):
        """Test a registered address is not available."""
        mock_client = Mock()
        mock_client.verify_registration_email.side_effect = BoxAPIError(
            "taken", code="email_already_registered"
        )

        assert Account(mock_client).available("me@example.com") is False

    def test_available_other_error(self):
        """Test other failures are raised."""
        mock_client = Mock()
        mock_client.verify_registration_email.side_effect = BoxAPIError(
            "bad", code="email_invalid"
        )

        with pytest.raises(BoxAPIError):
            Account(mock_client).available("bad")


class TestAccountInfo:
    """Tests for account info and the root folder."""

    def test_info_cached(self):
        """Test account info is requested once."""
        mock_client = Mock()
        mock_client.get_account_info.return_value = {
            "status": "get_account_info_ok",
            "user": {"login": "me@example.com", "space_used": "10"},
        }
        account = Account(mock_client)

        account.info()
        info = account.info()

        assert info["space_used"] == "10"
        mock_client.get_account_info.assert_called_once()

    def test_info_missing_user(self):
        """Test an account info response without user."""
        mock_client = Mock()
        mock_client.get_account_info.return_value = {"status": "get_account_info_ok"}

        with pytest.raises(BoxProtocolError):
            Account(mock_client).info()

    def test_root(self):
        """Test the root folder needs no request."""
        mock_client = Mock()

        root = Account(mock_client).root()

        assert isinstance(root, Folder)
        assert root.id == "0"
        assert mock_client.method_calls == []
