"""
Desired and observed state of a Pet resource.

PetParameters is the user-declared configuration read from a resource's
spec; PetObservation is what gets reported back after each fetch.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clients.pet import PetStatus


class CategoryRef(BaseModel):
    """Category a pet should belong to."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class TagRef(BaseModel):
    """Tag a pet should carry."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class PetParameters(BaseModel):
    """Configurable fields of a Pet."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Pet name")
    category: Optional[CategoryRef] = Field(None, description="Pet category")
    tags: FrozenSet[TagRef] = Field(default=frozenset(), description="Pet tags")
    photo_urls: FrozenSet[str] = Field(
        default=frozenset(), alias="photoUrls", description="Photo URLs"
    )

    # An absent collection means the same as an empty one.
    @field_validator("tags", "photo_urls", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


@dataclass
class PetObservation:
    """Observable fields of a Pet."""

    id: int
    status: Optional[PetStatus] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value if self.status is not None else None,
        }
