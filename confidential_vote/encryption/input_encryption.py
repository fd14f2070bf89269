# confidential_vote/encryption/input_encryption.py
"""Encrypted ballot inputs bound to an election address and a voter.

A client encrypts its proposal choice as a 32-bit unsigned integer:
1. The value is encrypted with AES-256-GCM; the election address and the
   voter address are authenticated as associated data, so an input produced
   for one voter or one election cannot be replayed by another.
2. The resulting package is signed with Ed25519 (the input proof). The
   coprocessor only imports inputs whose proof verifies.

Both keys are derived from one master key with HKDF.

Exception hierarchy:
- InputVerificationError: Base class for all input verification failures
  - MalformedInputError: Bad base64/JSON or missing package fields
  - ProofVerificationError: Input proof does not match the package/binding
  - InputIntegrityError: GCM tag check failed or plaintext is not a uint32

Usage:
    svc = InputEncryptionService(master_key='input-master-key')
    encrypted = svc.encrypt_uint32(1, election_address, voter_address)
    value = svc.verify_and_decode(encrypted, election_address, voter_address)
"""

import base64
import hashlib
import json
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

UINT32_BYTES = 4


@dataclass(frozen=True)
class EncryptedInput:
    handle: str
    proof: str

    def to_dict(self):
        return {"handle": self.handle, "proof": self.proof}


class InputEncryptionService:
    def __init__(self, master_key=None):
        if master_key is None:
            master_key = os.environ.get('INPUT_ENCRYPTION_KEY', 'default-input-key-change-in-production')
        self.master_key = master_key.encode()
        self.cipher_key = self._derive(b"confidential-vote/input-cipher")
        self.signing_key = Ed25519PrivateKey.from_private_bytes(self._derive(b"confidential-vote/input-proof"))
        self.verify_key = self.signing_key.public_key()

    def _derive(self, info: bytes) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=info,
        )
        return hkdf.derive(self.master_key)

    @staticmethod
    def _binding(contract_address: str, user_address: str) -> bytes:
        return f"{contract_address.lower()}:{user_address.lower()}".encode()

    def _proof_digest(self, handle: str, contract_address: str, user_address: str) -> bytes:
        return hashlib.sha256(self._binding(contract_address, user_address) + b"|" + handle.encode()).digest()

    def encrypt_uint32(self, value: int, contract_address: str, user_address: str) -> EncryptedInput:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 2 ** 32:
            raise ValueError("Input value must be an unsigned 32-bit integer")
        iv = os.urandom(12)  # GCM standard nonce length

        encryptor = Cipher(algorithms.AES(self.cipher_key), modes.GCM(iv)).encryptor()
        encryptor.authenticate_additional_data(self._binding(contract_address, user_address))
        ciphertext = encryptor.update(value.to_bytes(UINT32_BYTES, 'big')) + encryptor.finalize()

        package = {
            'type': 'euint32',
            'ciphertext': base64.b64encode(ciphertext).decode(),
            'iv': base64.b64encode(iv).decode(),
            'tag': base64.b64encode(encryptor.tag).decode(),
        }
        handle = base64.b64encode(json.dumps(package, sort_keys=True).encode()).decode()
        signature = self.signing_key.sign(self._proof_digest(handle, contract_address, user_address))
        return EncryptedInput(handle=handle, proof=base64.b64encode(signature).decode())

    def verify_and_decode(self, encrypted_input: EncryptedInput, contract_address: str, user_address: str) -> int:
        """Verify the input proof, then decrypt. Raises InputVerificationError subclasses."""
        # Step 1: verify the proof over handle + binding
        try:
            signature = base64.b64decode(encrypted_input.proof, validate=True)
        except Exception as e:
            raise MalformedInputError(f"Invalid proof encoding: {e}")
        try:
            self.verify_key.verify(signature, self._proof_digest(encrypted_input.handle, contract_address, user_address))
        except InvalidSignature:
            raise ProofVerificationError("Input proof does not verify for this election and user")

        # Step 2: decode the package
        try:
            package = json.loads(base64.b64decode(encrypted_input.handle, validate=True).decode())
        except Exception as e:
            raise MalformedInputError(f"Invalid input package: {e}")
        required_fields = ['ciphertext', 'iv', 'tag']
        missing_fields = [f for f in required_fields if f not in package]
        if missing_fields:
            raise MalformedInputError(f"Missing required fields: {', '.join(missing_fields)}")
        if package.get('type', 'euint32') != 'euint32':
            raise MalformedInputError(f"Unsupported input type: {package['type']}")

        # Step 3: decrypt AES-GCM ciphertext (verify tag)
        try:
            decryptor = Cipher(
                algorithms.AES(self.cipher_key),
                modes.GCM(base64.b64decode(package['iv']), base64.b64decode(package['tag']))
            ).decryptor()
            decryptor.authenticate_additional_data(self._binding(contract_address, user_address))
            plaintext = decryptor.update(base64.b64decode(package['ciphertext'])) + decryptor.finalize()
        except InvalidTag as e:
            raise InputIntegrityError(f"GCM authentication failed: {e}")
        except Exception as e:
            raise InputIntegrityError(f"Failed to decrypt input: {e}")

        if len(plaintext) != UINT32_BYTES:
            raise InputIntegrityError("Decrypted input is not a 32-bit value")
        return int.from_bytes(plaintext, 'big')


class InputVerificationError(Exception):
    """Base exception for encrypted input verification failures."""
    pass


class MalformedInputError(InputVerificationError):
    """Raised when the input handle or proof is malformed (bad base64/JSON)."""
    pass


class ProofVerificationError(InputVerificationError):
    """Raised when the input proof does not verify."""
    pass


class InputIntegrityError(InputVerificationError):
    """Raised when the ciphertext fails authentication (GCM tag mismatch)."""
    pass
