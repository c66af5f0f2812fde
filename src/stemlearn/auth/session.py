"""Current-user resolution through an OS-backed credential store.

The relational store never holds the session pointer. It lives under the
``current_user_id`` key of a :class:`CredentialStore`; production uses the
system keyring, tests use :class:`MemoryCredentialStore`.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user_id"
LEGACY_PASSWORD_KEY_PREFIX = "password_"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def legacy_password_key(email: str) -> str:
    """Key under which old releases cached a per-email password."""
    return LEGACY_PASSWORD_KEY_PREFIX + _UNSAFE_KEY_CHARS.sub("_", email)


class CredentialStore(Protocol):
    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def delete_item(self, key: str) -> None: ...


class MemoryCredentialStore:
    """Process-local credential store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def delete_item(self, key: str) -> None:
        self.items.pop(key, None)


class KeyringCredentialStore:
    """Credential store backed by the operating system keyring.

    keyring calls block, so each runs in a worker thread.
    """

    def __init__(self, service: str) -> None:
        self.service = service

    async def get_item(self, key: str) -> str | None:
        return await asyncio.to_thread(keyring.get_password, self.service, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(keyring.set_password, self.service, key, value)

    async def delete_item(self, key: str) -> None:
        try:
            await asyncio.to_thread(keyring.delete_password, self.service, key)
        except PasswordDeleteError:
            # Already absent.
            pass


class SessionProvider:
    """Resolves and records which user is signed in on this device."""

    def __init__(self, credentials: CredentialStore) -> None:
        self.credentials = credentials

    async def current_user_id(self) -> str | None:
        try:
            return await self.credentials.get_item(CURRENT_USER_KEY)
        except KeyringError:
            logger.exception("Failed to read current user from credential store")
            return None

    async def sign_in(self, user_id: str, email: str | None = None) -> None:
        await self.credentials.set_item(CURRENT_USER_KEY, user_id)
        if email:
            await self.credentials.delete_item(legacy_password_key(email))

    async def sign_out(self) -> None:
        await self.credentials.delete_item(CURRENT_USER_KEY)
