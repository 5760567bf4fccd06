"""Face matching value objects."""
from pydantic import BaseModel, Field


class MatchDecision(BaseModel):
    """Outcome of comparing a freshly extracted descriptor against a stored template."""
    distance: float = Field(..., ge=0.0, description="Euclidean distance between the descriptors")
    threshold: float = Field(..., ge=0.0, description="Maximum distance accepted as a match")
    is_match: bool = Field(..., description="Whether distance <= threshold")
