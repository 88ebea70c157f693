"""
Google credential provider for the dashboard.

Supplies a bearer token for the Calendar API, running the OAuth
installed-app flow when asked to be interactive. A token reported as
expired by a calendar request is invalidated so that the next request
for a token refreshes it instead of handing it out again.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Set

import httpx
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from newtab.core.errors import CredentialStoreError
from newtab.core.models import AuthState, Authenticated, Unauthenticated

logger = logging.getLogger(__name__)

# If modifying these scopes, delete the file token.json
SCOPES = ['https://www.googleapis.com/auth/calendar.readonly']

REVOKE_URL = 'https://oauth2.googleapis.com/revoke'


class GoogleCredentialProvider:
    """
    Token source backed by token.json in the credentials directory.

    Safe to share between concurrent calendar fetches: invalidate() may be
    called any number of times for the same token.
    """

    def __init__(self, credentials_dir: Path, scopes: Optional[list] = None):
        """
        Initialize the provider.

        Args:
            credentials_dir: Directory containing credentials.json and token.json
            scopes: OAuth scopes to request (defaults to read-only calendar)
        """
        self.credentials_dir = Path(credentials_dir)
        self.credentials_file = self.credentials_dir / "credentials.json"
        self.token_file = self.credentials_dir / "token.json"
        self.scopes = scopes or SCOPES

        self._lock = threading.Lock()
        self._credentials: Optional[Credentials] = None
        self._invalidated: Set[str] = set()

    def _load_stored(self) -> Optional[Credentials]:
        """Load credentials from token.json, None when missing or unreadable."""
        try:
            if not self.token_file.exists():
                return None
            creds = Credentials.from_authorized_user_file(str(self.token_file), self.scopes)
            logger.debug("Loaded existing credentials from token.json")
            return creds
        except (ValueError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to parse {self.token_file}: {e}")
            return None
        except OSError as e:
            raise CredentialStoreError(f"Cannot read {self.token_file}: {e}") from e

    def _save(self, creds: Credentials) -> None:
        try:
            self.credentials_dir.mkdir(parents=True, exist_ok=True)
            with open(self.token_file, 'w') as token:
                token.write(creds.to_json())
            logger.info(f"Saved credentials to {self.token_file}")
        except OSError as e:
            raise CredentialStoreError(f"Cannot write {self.token_file}: {e}") from e

    def _is_usable(self, creds: Optional[Credentials]) -> bool:
        with self._lock:
            return bool(creds and creds.valid and creds.token not in self._invalidated)

    def _refresh(self, creds: Credentials) -> Optional[Credentials]:
        try:
            creds.refresh(Request())
            logger.info("Refreshed expired credentials")
        except (RefreshError, TransportError) as e:
            logger.warning(f"Failed to refresh credentials: {e}")
            return None
        self._save(creds)
        return creds

    def _run_flow(self) -> Optional[Credentials]:
        if not self.credentials_file.exists():
            logger.error(f"Credentials file not found: {self.credentials_file}")
            return None
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.credentials_file), self.scopes
            )
            creds = flow.run_local_server(port=0)
            logger.info("Completed OAuth flow, obtained new credentials")
        except Exception as e:
            logger.error(f"OAuth flow failed: {e}")
            return None
        self._save(creds)
        return creds

    def get_token(self, interactive: bool = False) -> Optional[str]:
        """
        Return a bearer token, or None when no usable credential exists.

        Args:
            interactive: Run the browser consent flow if no stored credential works

        Raises:
            CredentialStoreError: the token store could not be read or written
        """
        with self._lock:
            creds = self._credentials
        if creds is None:
            creds = self._load_stored()

        if not self._is_usable(creds):
            if creds and creds.refresh_token:
                creds = self._refresh(creds)
            else:
                creds = None
            if creds is None and interactive:
                creds = self._run_flow()

        if not self._is_usable(creds):
            logger.info("No usable Google credential")
            return None

        with self._lock:
            if creds is not self._credentials:
                # Rejected tokens can no longer be handed out once replaced
                self._invalidated.clear()
            self._credentials = creds
        return creds.token

    def auth_state(self, interactive: bool = False) -> AuthState:
        """Wrap get_token() as an explicit auth state value."""
        token = self.get_token(interactive=interactive)
        if token is None:
            return Unauthenticated()
        return Authenticated(token)

    def invalidate(self, token: str) -> None:
        """Forget a token the API rejected. Idempotent."""
        with self._lock:
            if token in self._invalidated:
                return
            self._invalidated.add(token)
            if self._credentials is not None and self._credentials.token == token:
                self._credentials = None
        logger.info("Invalidated cached calendar token")

    def logout(self) -> None:
        """Invalidate and delete the stored credential, then revoke it at Google."""
        creds = self._credentials or self._load_stored()
        token = creds.token if creds else None

        if token:
            self.invalidate(token)
        with self._lock:
            self._credentials = None
        try:
            self.token_file.unlink(missing_ok=True)
        except OSError as e:
            raise CredentialStoreError(f"Cannot delete {self.token_file}: {e}") from e

        if not token:
            return
        try:
            httpx.post(REVOKE_URL, params={'token': token}, timeout=10.0)
            logger.info("Revoked Google token")
        except httpx.HTTPError as e:
            logger.warning(f"Token revoke request failed: {e}")
