# confidential_vote/security/input_validator.py

import re

from confidential_vote.encryption.input_encryption import EncryptedInput

# Request payload validation for the election API.

MAX_PROPOSALS = 256
MAX_HANDLE_LENGTH = 4096
MAX_WEI = 2 ** 256 - 1


class ValidationError(ValueError):
    pass


class InputValidator:
    def __init__(self):
        self.patterns = {
            'principal': re.compile(r'^0x[0-9a-fA-F]{40}$'),
            'base64': re.compile(r'^[A-Za-z0-9+/]+={0,2}$'),
            'ciphertext_handle': re.compile(r'^0x[0-9a-f]{64}$'),
            'wei': re.compile(r'^[0-9]{1,78}$'),
        }

    def validate_principal(self, principal):
        return isinstance(principal, str) and bool(self.patterns['principal'].match(principal))

    def validate_ciphertext_handle(self, handle):
        return isinstance(handle, str) and bool(self.patterns['ciphertext_handle'].match(handle))

    def _require_dict(self, payload):
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        return payload

    def _wei(self, value, field):
        # JSON clients often send big integers as decimal strings
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {field}")
        if isinstance(value, str) and self.patterns['wei'].match(value):
            value = int(value)
        if isinstance(value, int) and 0 <= value <= MAX_WEI:
            return value
        raise ValidationError(f"Invalid {field}")

    def _base64_field(self, payload, field):
        value = payload.get(field)
        if not isinstance(value, str) or not value:
            raise ValidationError(f"Missing required field: {field}")
        if len(value) > MAX_HANDLE_LENGTH or not self.patterns['base64'].match(value):
            raise ValidationError(f"Invalid {field} encoding")
        return value

    def validate_registration(self, payload):
        payload = self._require_dict(payload)
        if 'fee' not in payload:
            raise ValidationError("Missing required field: fee")
        return {'fee': self._wei(payload['fee'], 'fee')}

    def validate_vote(self, payload):
        payload = self._require_dict(payload)
        return EncryptedInput(handle=self._base64_field(payload, 'handle'),
                              proof=self._base64_field(payload, 'proof'))

    def validate_reset(self, payload):
        payload = self._require_dict(payload)
        num_proposals = payload.get('num_proposals')
        if isinstance(num_proposals, bool) or not isinstance(num_proposals, int):
            raise ValidationError("num_proposals must be an integer")
        if not 0 <= num_proposals <= MAX_PROPOSALS:
            raise ValidationError(f"num_proposals must be between 0 and {MAX_PROPOSALS}")
        return {'num_proposals': num_proposals}

    def validate_decrypt(self, payload):
        payload = self._require_dict(payload)
        handle = payload.get('handle')
        if not self.validate_ciphertext_handle(handle):
            raise ValidationError("Invalid ciphertext handle")
        return handle
