"""
Unit tests for the Google credential provider.
"""

import json
import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from newtab.core.models import Authenticated, Unauthenticated
from newtab.integrations.google_auth import GoogleCredentialProvider
from newtab.integrations.google_auth import credentials as credentials_module


@pytest.fixture
def provider(tmp_path):
    return GoogleCredentialProvider(tmp_path / "google_credentials")


@pytest.fixture
def stored_token(provider):
    provider.credentials_dir.mkdir(parents=True)
    provider.token_file.write_text(json.dumps({
        "token": "stored-token",
        "refresh_token": "refresh-me",
        "client_id": "client.apps.googleusercontent.com",
        "client_secret": "secret",
    }))
    return provider.token_file


class TestGetToken:
    def test_no_token_file(self, provider):
        assert provider.get_token() is None
        assert isinstance(provider.auth_state(), Unauthenticated)

    def test_stored_token(self, provider, stored_token):
        assert provider.get_token() == "stored-token"
        assert provider.auth_state() == Authenticated("stored-token")

    def test_corrupt_token_file(self, provider):
        provider.credentials_dir.mkdir(parents=True)
        provider.token_file.write_text("{not json")

        assert provider.get_token() is None

    def test_silent_mode_never_runs_flow(self, provider):
        with patch.object(provider, "_run_flow") as run_flow:
            provider.get_token(interactive=False)

        run_flow.assert_not_called()

    def test_interactive_without_client_secrets(self, provider):
        assert provider.get_token(interactive=True) is None


class TestInvalidate:
    def test_invalidated_token_not_handed_out_again(self, provider, stored_token):
        assert provider.get_token() == "stored-token"

        provider.invalidate("stored-token")

        with patch.object(Credentials, "refresh", side_effect=RefreshError("revoked")) as refresh:
            assert provider.get_token() is None
        refresh.assert_called_once()

    def test_idempotent(self, provider):
        cached = MagicMock(token="t-1", valid=True)
        provider._credentials = cached

        provider.invalidate("t-1")
        provider.invalidate("t-1")
        provider.invalidate("t-1")

        assert provider._credentials is None
        assert provider._invalidated == {"t-1"}

    def test_rejected_tokens_forgotten_after_refresh(self, provider, stored_token):
        provider.get_token()
        provider.invalidate("stored-token")

        def refresh(creds, request):
            creds.token = "fresh-token"

        with patch.object(Credentials, "refresh", autospec=True, side_effect=refresh):
            assert provider.get_token() == "fresh-token"

        assert provider._invalidated == set()
        assert json.loads(stored_token.read_text())["token"] == "fresh-token"

    def test_cached_token_keeps_rejections(self, provider):
        provider._credentials = MagicMock(token="current", valid=True)
        provider.invalidate("older")

        provider.get_token()

        assert provider._invalidated == {"older"}

    def test_other_token_keeps_cache(self, provider):
        cached = MagicMock(token="current", valid=True)
        provider._credentials = cached

        provider.invalidate("older")

        assert provider.get_token() == "current"


class TestLogout:
    def test_deletes_and_revokes(self, provider, stored_token):
        with patch.object(credentials_module.httpx, "post") as post:
            provider.logout()

        assert not stored_token.exists()
        post.assert_called_once()
        assert post.call_args.kwargs["params"] == {"token": "stored-token"}
        assert provider.get_token() is None

    def test_revoke_failure_is_not_fatal(self, provider, stored_token):
        request = credentials_module.httpx.Request("POST", credentials_module.REVOKE_URL)
        error = credentials_module.httpx.ConnectError("offline", request=request)
        with patch.object(credentials_module.httpx, "post", side_effect=error):
            provider.logout()

        assert not stored_token.exists()

    def test_without_token(self, provider):
        with patch.object(credentials_module.httpx, "post") as post:
            provider.logout()

        post.assert_not_called()
