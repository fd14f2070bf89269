# confidential_vote/encryption/arithmetic.py
"""Confidential arithmetic capability used by the tally engine.

The engine only ever sees `Ciphertext` handles. Every comparison yields an
encrypted boolean and every conditional is a `select`, so no engine code path
branches on a secret value.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

UINT32_MODULUS = 2 ** 32


class CiphertextType(Enum):
    EBOOL = "ebool"
    EUINT32 = "euint32"


@dataclass(frozen=True)
class Ciphertext:
    handle: str
    type: CiphertextType = CiphertextType.EUINT32

    def to_dict(self):
        return {"handle": self.handle, "type": self.type.value}


class CiphertextAccessError(Exception):
    """Raised when the executor uses a handle it holds no grant for."""
    pass


class ConfidentialArithmetic(ABC):

    @abstractmethod
    def encrypt(self, value: int, ctype: CiphertextType = CiphertextType.EUINT32) -> Ciphertext:
        """Trivially encrypt a public constant."""

    @abstractmethod
    def add(self, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        ...

    @abstractmethod
    def sub(self, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        ...

    @abstractmethod
    def mul(self, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        ...

    @abstractmethod
    def eq(self, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        ...

    @abstractmethod
    def gt(self, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        ...

    @abstractmethod
    def select(self, condition: Ciphertext, a: Ciphertext, b: Ciphertext) -> Ciphertext:
        """Return a ciphertext of `a` if `condition` holds, else of `b`."""

    @abstractmethod
    def verify_and_decode(self, encrypted_input, user_address: str) -> Ciphertext:
        """Verify an externally produced input and import it as a ciphertext."""
