"""Supabase backend client creation.

The client is built once from the resolved settings and reused for the
lifetime of the app. Callers that need a client (the session manager, the
expense repository) receive it explicitly; :func:`get_client` is only the
default factory used when the application starts.
"""

import logging
from typing import Any, Dict, Optional

from PySide6 import QtCore
from supabase import Client, create_client

from ..status import status

# Cached backend client to avoid re-creating HTTP sessions
_cached_client: Optional[Client] = None


def create_service_client(config: Optional[Dict[str, str]] = None) -> Client:
    """
    Builds a new backend client.

    Args:
        config (dict, optional): {'url': str, 'key': str}. Resolved from the settings when omitted.

    Returns:
        supabase.Client: A new client instance.

    Raises:
        status.ClientConfigNotFoundException: If the URL or key is not configured.
        status.ClientConfigInvalidException: If the URL is malformed.
        status.ServiceUnavailableException: If the client cannot be created.
    """
    from ..settings import lib

    if config is None:
        config = lib.settings.client_config()
    else:
        lib.settings.validate_client_config(config)

    try:
        client: Client = create_client(config['url'], config['key'])
    except Exception as ex:
        raise status.ServiceUnavailableException(f'Failed to create the service client: {ex}') from ex

    logging.debug(f'Service client created for {config["url"]}.')
    return client


def get_client() -> Client:
    """
    Returns the cached backend client, creating it on first use.

    Returns:
        supabase.Client: The shared client instance.
    """
    global _cached_client
    if _cached_client is not None:
        return _cached_client

    _cached_client = create_service_client()
    return _cached_client


def clear_client() -> None:
    """
    Clears the cached backend client.
    """
    global _cached_client

    if _cached_client is not None:
        logging.debug('Clearing cached service client.')
    _cached_client = None


def error_message(ex: BaseException) -> str:
    """
    Extracts the backend's free-text message from an exception.

    Both the auth and the table errors carry a ``message`` attribute; anything
    else falls back to ``str(ex)``.
    """
    message: Any = getattr(ex, 'message', None)
    if isinstance(message, str) and message:
        return message
    return str(ex) or ex.__class__.__name__


# Reset the cached client when the client configuration changes
from ..ui.actions import signals


@QtCore.Slot(str)
def _reset_cached_client(section: str) -> None:
    """Clear the cached client when the client section changes."""
    if section == 'client':
        logging.debug('Clearing cached service client due to client config change')
        clear_client()


signals.configSectionChanged.connect(_reset_cached_client)
