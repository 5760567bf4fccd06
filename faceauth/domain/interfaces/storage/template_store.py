"""Face template storage interface."""
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ...entities.identity import FaceTemplate, Identity, IdentityKey


class TemplateStore(ABC):
    """Interface for persisting identities and their face templates.

    Implementations must make `put_template` atomic per identity.
    """

    @abstractmethod
    async def find_identity(self, email: str) -> Optional[Identity]:
        """Look up an identity by exact email match."""
        pass

    @abstractmethod
    async def get_template(self, identity_key: IdentityKey) -> Optional[FaceTemplate]:
        """Return the template of an identity (by id or email), if any."""
        pass

    @abstractmethod
    async def put_template(self, identity_key: IdentityKey, descriptor: Sequence[float]) -> Identity:
        """
        Create or wholesale replace the template of an identity.

        Args:
            identity_key: Email for a new identity, id or email for an existing one
            descriptor: Face descriptor to store

        Returns:
            The owning identity, with its id assigned
        """
        pass

    @abstractmethod
    async def delete_template(self, identity_key: IdentityKey) -> None:
        """Remove the identity together with its template. Missing identities are ignored."""
        pass
