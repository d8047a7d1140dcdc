"""Session Provider Port - the identity/session provider consumed by KYC.

The provider is bound to one caller (one request / one token). KYC never
authenticates users itself.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Session


class SessionProviderPort(ABC):

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """Return the caller's live session, or None if it cannot be confirmed."""
        pass

    async def get_user_id(self) -> Optional[str]:
        """Resolve the currently authenticated identity."""
        session = await self.get_session()
        return session.user_id if session else None
