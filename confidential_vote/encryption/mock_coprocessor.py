# confidential_vote/encryption/mock_coprocessor.py
"""In-process stand-in for a confidential compute coprocessor.

Plaintexts are kept behind opaque handles and never leave this object except
through `DecryptionService`. Result handles are a pure function of the
operation and its input handles, so replaying the same operation sequence
yields the same handles.
"""

import hashlib
import json
import logging

from confidential_vote.encryption.arithmetic import (
    UINT32_MODULUS,
    Ciphertext,
    CiphertextAccessError,
    CiphertextType,
    ConfidentialArithmetic,
)

logger = logging.getLogger(__name__)


class MockCoprocessor(ConfidentialArithmetic):
    def __init__(self, acl, input_service, executor: str):
        """
        acl: AccessControlLedger consulted for every input handle
        input_service: InputEncryptionService used to verify external inputs
        executor: principal (the election address) that runs the operations
        """
        self.acl = acl
        self.input_service = input_service
        self.executor = executor.lower()
        self._plaintexts = {}
        acl.on_release(self._forget)

    def _forget(self, handles):
        # intermediates nobody can reach any more
        for handle in handles:
            self._plaintexts.pop(handle, None)

    def _derive_handle(self, op, ctype, *parts):
        digest = hashlib.sha256(json.dumps([op, ctype.value, *parts]).encode()).hexdigest()
        return "0x" + digest

    def _produce(self, op, ctype, value, *parts):
        handle = self._derive_handle(op, ctype, *parts)
        self._plaintexts[handle] = value
        self.acl.allow_transient(handle, self.executor)
        return Ciphertext(handle, ctype)

    def _load(self, ciphertext, expected_type=None):
        if ciphertext.handle not in self._plaintexts:
            raise CiphertextAccessError(f"Unknown ciphertext handle {ciphertext.handle}")
        if not self.acl.is_allowed(ciphertext.handle, self.executor):
            raise CiphertextAccessError(f"Executor has no grant on {ciphertext.handle}")
        if expected_type is not None and ciphertext.type != expected_type:
            raise TypeError(f"Expected {expected_type.value}, got {ciphertext.type.value}")
        return self._plaintexts[ciphertext.handle]

    def _binary_uint32(self, op, a, b, fn, result_type=CiphertextType.EUINT32):
        x = self._load(a, CiphertextType.EUINT32)
        y = self._load(b, CiphertextType.EUINT32)
        return self._produce(op, result_type, fn(x, y), a.handle, b.handle)

    def encrypt(self, value, ctype=CiphertextType.EUINT32):
        if ctype == CiphertextType.EBOOL:
            value = bool(value)
        else:
            value = int(value) % UINT32_MODULUS
        return self._produce("trivial", ctype, value, int(value))

    def add(self, a, b):
        return self._binary_uint32("add", a, b, lambda x, y: (x + y) % UINT32_MODULUS)

    def sub(self, a, b):
        return self._binary_uint32("sub", a, b, lambda x, y: (x - y) % UINT32_MODULUS)

    def mul(self, a, b):
        return self._binary_uint32("mul", a, b, lambda x, y: (x * y) % UINT32_MODULUS)

    def eq(self, a, b):
        return self._binary_uint32("eq", a, b, lambda x, y: x == y, CiphertextType.EBOOL)

    def gt(self, a, b):
        return self._binary_uint32("gt", a, b, lambda x, y: x > y, CiphertextType.EBOOL)

    def select(self, condition, a, b):
        if a.type != b.type:
            raise TypeError(f"Cannot select between {a.type.value} and {b.type.value}")
        flag = self._load(condition, CiphertextType.EBOOL)
        x = self._load(a)
        y = self._load(b)
        return self._produce("select", a.type, x if flag else y, condition.handle, a.handle, b.handle)

    def verify_and_decode(self, encrypted_input, user_address):
        # raises InputVerificationError subclasses on failure
        value = self.input_service.verify_and_decode(encrypted_input, self.executor, user_address)
        external = hashlib.sha256(encrypted_input.handle.encode()).hexdigest()
        logger.debug("Imported external input for %s", user_address)
        return self._produce("input", CiphertextType.EUINT32, value, external, user_address.lower())

    def resolve_plaintext(self, handle):
        """Plaintext behind a handle. Only the decryption service calls this."""
        try:
            return self._plaintexts[handle]
        except KeyError:
            raise CiphertextAccessError(f"Unknown ciphertext handle {handle}")
