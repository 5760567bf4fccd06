"""In-process template store."""
import itertools
from typing import Dict, Optional, Sequence

from faceauth.core.logging import get_logger
from faceauth.domain.entities.identity import FaceTemplate, Identity, IdentityKey
from faceauth.domain.interfaces.storage.template_store import TemplateStore

logger = get_logger(__name__)


class InMemoryTemplateStore(TemplateStore):
    """Template store kept in process memory.

    Suitable for development and tests. Identities get sequential ids on
    first registration. Every method runs without awaiting, so a write
    is atomic with respect to other coroutines on the same loop.
    """

    def __init__(self) -> None:
        self._identities_by_email: Dict[str, Identity] = {}
        self._identities_by_id: Dict[int, Identity] = {}
        self._templates: Dict[int, FaceTemplate] = {}
        self._ids = itertools.count(1)

    def _resolve(self, identity_key: IdentityKey) -> Optional[Identity]:
        if isinstance(identity_key, int):
            return self._identities_by_id.get(identity_key)
        return self._identities_by_email.get(identity_key)

    async def find_identity(self, email: str) -> Optional[Identity]:
        return self._identities_by_email.get(email)

    async def get_template(self, identity_key: IdentityKey) -> Optional[FaceTemplate]:
        identity = self._resolve(identity_key)
        if identity is None:
            return None
        return self._templates.get(identity.id)

    async def put_template(self, identity_key: IdentityKey, descriptor: Sequence[float]) -> Identity:
        identity = self._resolve(identity_key)
        if identity is None:
            if not isinstance(identity_key, str):
                raise KeyError(f"Unknown identity: {identity_key}")
            identity = Identity(id=next(self._ids), email=identity_key)
            self._identities_by_email[identity.email] = identity
            self._identities_by_id[identity.id] = identity
            logger.info("Identity created", user_id=identity.id)

        self._templates[identity.id] = FaceTemplate(owner_id=identity.id, descriptor=list(descriptor))
        return identity

    async def delete_template(self, identity_key: IdentityKey) -> None:
        identity = self._resolve(identity_key)
        if identity is None:
            return
        self._templates.pop(identity.id, None)
        self._identities_by_email.pop(identity.email, None)
        self._identities_by_id.pop(identity.id, None)
        logger.info("Identity deleted", user_id=identity.id)
