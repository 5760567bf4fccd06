"""Token issuer interface."""
from abc import ABC, abstractmethod

from ...entities.identity import Identity


class TokenIssuer(ABC):
    """Interface for issuing session tokens after a successful face match."""

    @abstractmethod
    async def issue_token(self, identity: Identity) -> str:
        """Return an opaque token for the authenticated identity."""
        pass
