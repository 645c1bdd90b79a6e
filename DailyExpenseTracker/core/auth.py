"""
Password authentication and session management.

Provides the session model, durable session storage behind a small
get/set/clear interface, and the :class:`SessionManager` that signs users in
and out through the backend's auth service.
"""

import dataclasses
import json
import logging
import pathlib
from typing import Any, Dict, Optional

import httpx
from supabase import AuthError, AuthRetryableError, Client

from .service import error_message
from ..status import status


@dataclasses.dataclass
class Session:
    """The authenticated identity and the tokens issued by the auth service."""
    user_id: str
    email: str
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None

    @classmethod
    def from_auth_response(cls, response: Any) -> 'Session':
        """Build a session from an auth response carrying ``user`` and ``session``.

        Raises:
            status.AuthenticationFailedException: If the response carries no session.
        """
        auth_session = getattr(response, 'session', None)
        user = getattr(response, 'user', None) or getattr(auth_session, 'user', None)
        if auth_session is None or user is None:
            raise status.AuthenticationFailedException('The auth service did not return a session.')

        return cls(
            user_id=str(user.id),
            email=user.email or '',
            access_token=auth_session.access_token,
            refresh_token=auth_session.refresh_token,
            expires_at=getattr(auth_session, 'expires_at', None),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        """Build a session from its serialized form.

        Raises:
            status.SessionInvalidException: If required fields are missing or empty.
        """
        if not isinstance(data, dict):
            raise status.SessionInvalidException(f'Expected a dict, got {type(data)}.')

        missing = [k for k in ('user_id', 'access_token', 'refresh_token') if not data.get(k)]
        if missing:
            raise status.SessionInvalidException(f'Stored session is missing {missing}.')

        return cls(
            user_id=str(data['user_id']),
            email=data.get('email') or '',
            access_token=data['access_token'],
            refresh_token=data['refresh_token'],
            expires_at=data.get('expires_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


class SessionStore:
    """Durable storage for a single serialized session."""

    def get(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def set(self, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    """Keeps the session for the lifetime of the process only."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data = dict(data) if data else None

    def get(self) -> Optional[Dict[str, Any]]:
        return dict(self._data) if self._data else None

    def set(self, data: Dict[str, Any]) -> None:
        self._data = dict(data)

    def clear(self) -> None:
        self._data = None


class FileSessionStore(SessionStore):
    """Stores the session as JSON in a single file.

    Args:
        path: The session file. Defaults to the session path from the settings.
    """

    def __init__(self, path: Optional[pathlib.Path] = None) -> None:
        if path is None:
            from ..settings import lib
            path = lib.settings.session_path
        self.path: pathlib.Path = pathlib.Path(path)

    def get(self) -> Optional[Dict[str, Any]]:
        """
        Read the stored session.

        Returns:
            dict or None: The stored data, or None if no session file exists.

        Raises:
            status.SessionInvalidException: If the file cannot be parsed.
        """
        if not self.path.exists():
            return None
        try:
            with self.path.open('r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as ex:
            raise status.SessionInvalidException(f'Failed to read {self.path}: {ex}') from ex

    def set(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as f:
            json.dump(data, f, indent=4)
        logging.debug(f'Session saved to {self.path}.')

    def clear(self) -> None:
        if self.path.exists():
            logging.debug(f'Deleting {self.path}...')
            self.path.unlink()
        else:
            logging.debug('No session file found. No action taken.')


class SessionManager:
    """Signs users in and out and keeps the current session in memory and in storage.

    Args:
        client: The backend client.
        store: Durable session storage. Defaults to :class:`FileSessionStore`.
    """

    def __init__(self, client: Client, store: Optional[SessionStore] = None) -> None:
        self.client = client
        self.store: SessionStore = store if store is not None else FileSessionStore()
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def user_id(self) -> Optional[str]:
        return self._session.user_id if self._session else None

    def login(self, email: str, password: str) -> Session:
        """
        Sign in with email and password.

        Returns:
            Session: The new session, also written to the session store.

        Raises:
            status.AuthenticationFailedException: If the credentials are rejected or the service is unreachable.
        """
        logging.debug(f'Signing in as "{email}"...')
        try:
            response = self.client.auth.sign_in_with_password({'email': email, 'password': password})
        except (AuthError, httpx.HTTPError) as ex:
            raise status.AuthenticationFailedException(error_message(ex)) from ex

        session = Session.from_auth_response(response)
        self._session = session
        self.store.set(session.to_dict())
        logging.info(f'Signed in as "{session.email or session.user_id}".')
        return session

    def logout(self) -> None:
        """
        Sign out remotely, then forget the session.

        Raises:
            status.AuthenticationFailedException: If the sign-out fails. The session is kept.
        """
        try:
            self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as ex:
            raise status.AuthenticationFailedException(error_message(ex)) from ex

        self._session = None
        self.store.clear()
        logging.info('Signed out.')

    def restore_session(self) -> Optional[Session]:
        """
        Restore the session saved by a previous run.

        Returns:
            Session or None: The restored session, or None if nothing usable was stored.

        A session the auth service rejects is removed from storage. One that
        cannot be verified because the service is unreachable is kept.
        """
        try:
            data = self.store.get()
            if not data:
                logging.debug('No stored session.')
                return None
            session = Session.from_dict(data)
        except status.SessionInvalidException:
            self.store.clear()
            return None

        try:
            response = self.client.auth.set_session(session.access_token, session.refresh_token)
        except (AuthRetryableError, httpx.HTTPError) as ex:
            # Unreachable service, the stored session is retried on the next start
            logging.warning(f'Could not verify the stored session, keeping it: {error_message(ex)}')
            return None
        except AuthError as ex:
            logging.warning(f'Stored session was rejected, signing out: {error_message(ex)}')
            self.store.clear()
            return None

        # The tokens may have been refreshed
        if response is not None and getattr(response, 'session', None) is not None:
            session = Session.from_auth_response(response)
            self.store.set(session.to_dict())

        self._session = session
        logging.info(f'Restored session for "{session.email or session.user_id}".')
        return session
