# confidential_vote/security/token_manager.py
from datetime import timedelta
from flask_jwt_extended import create_access_token, get_jwt_identity
from flask import current_app, Flask

from confidential_vote.security.input_validator import InputValidator


# JWT bearer tokens whose identity is the caller's principal address.
class TokenManager:
    def __init__(self, app: Flask = None):
        self.validator = InputValidator()
        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        app.config.setdefault("JWT_ACCESS_TOKEN_EXPIRES", timedelta(hours=1))

    def generate_token(self, principal: str, expires_in: int = 3600) -> str:
        if not self.validator.validate_principal(principal):
            raise ValueError("principal must be a 0x-prefixed 20-byte hex address")
        expires_delta = timedelta(seconds=expires_in)
        return create_access_token(identity=principal.lower(), expires_delta=expires_delta)

    def get_identity(self):
        # Principal of the verified JWT in request context, None if the
        # identity is not an address.
        identity = get_jwt_identity()
        if not self.validator.validate_principal(identity):
            current_app.logger.warning(f"Token identity is not a principal: {identity!r}")
            return None
        return identity.lower()
