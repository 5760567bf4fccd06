"""Core identity domain entities."""
from typing import List, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Email before a numeric id is assigned, the id afterwards
IdentityKey = Union[int, str]


class Identity(BaseModel):
    """A user known to the authentication service."""
    id: Optional[int] = Field(None, description="Stable numeric identifier, absent before registration")
    email: str = Field(..., description="Case-sensitive exact-match email address")

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> IdentityKey:
        """Stable identity key: the id once assigned, the email before that."""
        return self.id if self.id is not None else self.email


class FaceTemplate(BaseModel):
    """Enrolled face descriptor used as the comparison baseline."""
    owner_id: IdentityKey = Field(..., description="Identity key of the owner")
    descriptor: List[float] = Field(..., description="Fixed-length face descriptor")

    model_config = ConfigDict(frozen=True)

    @field_validator('descriptor', mode='before')
    @classmethod
    def validate_descriptor(cls, v: Union[np.ndarray, list]) -> List[float]:
        """Convert numpy descriptors to plain float lists and reject empty ones."""
        if isinstance(v, np.ndarray):
            v = v.astype(float).ravel().tolist()
        if len(v) == 0:
            raise ValueError("descriptor must not be empty")
        return v

    def as_array(self) -> np.ndarray:
        """Return the descriptor as a float64 numpy vector."""
        return np.asarray(self.descriptor, dtype=np.float64)
