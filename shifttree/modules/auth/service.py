import logging
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError
from supabase import Client

from shifttree.config.settings import Settings
from shifttree.core.errors import InternalError, Unauthenticated
from shifttree.modules.auth.schemas import TokenPayload
from shifttree.modules.users.service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client, settings: Settings):
        self.supabase = supabase
        self.settings = settings
        self.users = UserService(supabase)

    def decode_token(self, token: str) -> TokenPayload:
        """Verify the token signature and return its email/name claims"""
        if not self.settings.jwt_secret:
            logger.error("JWT_SECRET is not configured; cannot verify tokens")
            raise InternalError("Token verification is not configured")
        try:
            claims = jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except ExpiredSignatureError:
            raise Unauthenticated("Token has expired")
        except JWTError as e:
            logger.info("Rejected token: %s", e)
            raise Unauthenticated("Invalid token")
        try:
            return TokenPayload(**claims)
        except ValidationError:
            raise Unauthenticated("Token is missing required claims")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve the bearer token to the caller's user_account row"""
        payload = self.decode_token(token)
        user = self.users.get_user_by_email(payload.email)
        if user is None:
            logger.warning("Valid token for unknown account %s", payload.email)
            raise Unauthenticated("Unknown user")
        return user
