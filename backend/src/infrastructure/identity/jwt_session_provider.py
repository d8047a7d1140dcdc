"""Session provider that re-validates the caller's bearer token.

Bound to one request. get_session() re-checks signature and expiry each time
it is called, so a token that expires mid-request is reported as no session.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import jwt

from auth.jwt import decode_token
from domain.kyc.models import Session
from domain.kyc.ports import SessionProviderPort

logger = logging.getLogger(__name__)


class JWTSessionProvider(SessionProviderPort):

    def __init__(self, token: Optional[str]):
        self.token = token

    async def get_session(self) -> Optional[Session]:
        if not self.token:
            return None

        try:
            payload = decode_token(self.token)
        except jwt.ExpiredSignatureError:
            logger.info("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Session token rejected: {e}")
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        exp = payload.get("exp")
        return Session(
            user_id=str(user_id),
            access_token=self.token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
            role=payload.get("role"),
            email=payload.get("email"),
        )
