# confidential_vote/encryption/acl.py
"""Capability ledger deciding who may use or decrypt a ciphertext handle.

Persistent grants survive across operations and are what the decryption
service checks. Transient grants live only inside one `operation()` scope and
are dropped when it exits, whether the operation succeeded or not.

The grant history is an append-only audit record and is never pruned.
"""

import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class GrantScope(Enum):
    PERSISTENT = "persistent"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class AccessGrant:
    handle: str
    principal: str
    scope: GrantScope
    operation_id: Optional[int] = None


class AccessControlError(Exception):
    pass


def handle_of(ciphertext) -> str:
    return getattr(ciphertext, "handle", ciphertext)


class AccessControlLedger:
    def __init__(self):
        self._persistent = set()  # (handle, principal)
        self._persistent_handles = set()
        self._transient = set()
        self._history: List[AccessGrant] = []
        self._operation_ids = itertools.count(1)
        self.current_operation = None
        self._release_listeners = []

    def on_release(self, callback):
        """Call `callback(handles)` with the handles left without any grant
        when an operation ends."""
        self._release_listeners.append(callback)

    @contextmanager
    def operation(self, name="operation"):
        if self.current_operation is not None:
            # nested scopes share the outer operation's transient grants
            yield self.current_operation
            return
        operation_id = next(self._operation_ids)
        self.current_operation = operation_id
        logger.debug("Operation %s (%s) started", operation_id, name)
        try:
            yield operation_id
        finally:
            released = {handle for handle, _ in self._transient
                        if handle not in self._persistent_handles}
            dropped = len(self._transient)
            self._transient.clear()
            self.current_operation = None
            logger.debug("Operation %s (%s) ended, %d transient grants dropped",
                         operation_id, name, dropped)
            for callback in self._release_listeners:
                callback(released)

    def allow(self, ciphertext, principal):
        handle = handle_of(ciphertext)
        key = (handle, principal)
        if key not in self._persistent:
            self._persistent.add(key)
            self._persistent_handles.add(handle)
            self._history.append(AccessGrant(handle, principal, GrantScope.PERSISTENT))

    def allow_transient(self, ciphertext, principal):
        if self.current_operation is None:
            raise AccessControlError("Transient grants require an active operation")
        handle = handle_of(ciphertext)
        key = (handle, principal)
        if key not in self._transient and key not in self._persistent:
            self._transient.add(key)
            self._history.append(
                AccessGrant(handle, principal, GrantScope.TRANSIENT, self.current_operation))

    def is_allowed(self, ciphertext, principal) -> bool:
        key = (handle_of(ciphertext), principal)
        return key in self._persistent or key in self._transient

    def is_allowed_for_decryption(self, ciphertext, principal) -> bool:
        return (handle_of(ciphertext), principal) in self._persistent

    def is_transient(self, ciphertext, principal) -> bool:
        return (handle_of(ciphertext), principal) in self._transient

    def grants(self, ciphertext=None) -> List[AccessGrant]:
        if ciphertext is None:
            return list(self._history)
        handle = handle_of(ciphertext)
        return [g for g in self._history if g.handle == handle]
