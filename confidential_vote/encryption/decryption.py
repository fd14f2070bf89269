# confidential_vote/encryption/decryption.py

import logging

from confidential_vote.encryption.acl import handle_of

logger = logging.getLogger(__name__)


class DecryptionNotPermitted(Exception):
    """Raised when a principal holds no persistent grant on a handle."""
    pass


class DecryptionService:
    """Off-system user decryption.

    Returns a plaintext only to a principal holding a persistent grant on the
    handle. Transient grants never qualify. Grants on handles discarded by a
    reset are not revoked and still decrypt.
    """

    def __init__(self, coprocessor, acl):
        self.coprocessor = coprocessor
        self.acl = acl

    def user_decrypt(self, ciphertext, principal: str):
        handle = handle_of(ciphertext)
        principal = principal.lower()
        if not self.acl.is_allowed_for_decryption(handle, principal):
            logger.warning("Decryption of %s denied for %s", handle, principal)
            raise DecryptionNotPermitted(f"{principal} may not decrypt {handle}")
        return self.coprocessor.resolve_plaintext(handle)
