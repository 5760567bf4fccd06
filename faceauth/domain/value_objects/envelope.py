"""Encrypted transport envelope value objects."""
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ENVELOPE_VERSION = "1.0"
SUPPORTED_VERSIONS = frozenset({ENVELOPE_VERSION})


class EncryptionEnvelope(BaseModel):
    """Versioned wrapper around an encrypted image, as sent by the client."""
    ciphertext: str = Field(..., alias="data", min_length=1, description="Encrypted base64 image")
    content_type: Optional[str] = Field(None, alias="contentType", description="Original image MIME type")
    encrypted_at: Optional[datetime] = Field(None, alias="encryptedAt", description="Client-side encryption time")
    version: str = Field(..., description="Envelope format version")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> str:
        """Serialize to the JSON body transmitted as the `encryptedImage` file part."""
        return self.model_dump_json(by_alias=True)


class StructuredEnvelope(BaseModel):
    """Envelope received in the JSON wrapper format."""
    kind: Literal["structured"] = "structured"
    envelope: EncryptionEnvelope

    @property
    def ciphertext(self) -> str:
        return self.envelope.ciphertext

    @property
    def content_type(self) -> Optional[str]:
        return self.envelope.content_type


class LegacyEnvelope(BaseModel):
    """Bare ciphertext received without the JSON wrapper.

    Older clients post the ciphertext string directly; content type and
    version are unknown for these.
    """
    kind: Literal["legacy"] = "legacy"
    raw: str = Field(..., min_length=1)

    @property
    def ciphertext(self) -> str:
        return self.raw

    @property
    def content_type(self) -> Optional[str]:
        return None


ParsedEnvelope = Annotated[
    Union[StructuredEnvelope, LegacyEnvelope],
    Field(discriminator="kind"),
]
