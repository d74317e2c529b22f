"""
Structural diff between a desired Pet and the pet observed in the store.

Tags and photo URLs are unordered collections and are compared as sets.
Desired collections are always sets (absent means empty), and an observed
pet whose tags are null is compared as having no tags.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set, Tuple

from clients.pet import Pet, Tag
from models import PetParameters, TagRef


@dataclass
class PetDiff:
    """Collection differences between desired and observed state."""

    added_tags: Set[Tag] = field(default_factory=set)
    removed_tags: Set[Tag] = field(default_factory=set)
    added_photo_urls: Set[str] = field(default_factory=set)
    removed_photo_urls: Set[str] = field(default_factory=set)

    @property
    def empty(self) -> bool:
        return not (
            self.added_tags
            or self.removed_tags
            or self.added_photo_urls
            or self.removed_photo_urls
        )


def diff_tags(
    spec: Iterable[TagRef], current: Optional[Iterable[Tag]]
) -> Tuple[Set[Tag], Set[Tag]]:
    """
    Compare tag sets keyed by (id, name).

    Args:
        spec: Desired tags
        current: Observed tags, None when the store reported none

    Returns:
        Tuple of (tags to add, tags to remove). A tag whose name changed
        appears in both, under its desired and observed names.
    """
    desired = {Tag(id=t.id, name=t.name) for t in spec}
    observed = set(current or ())
    return desired - observed, observed - desired


def diff_photo_urls(
    spec: Iterable[str], current: Optional[Iterable[str]]
) -> Tuple[Set[str], Set[str]]:
    """Compare photo URL sets, returning (URLs to add, URLs to remove)."""
    desired = set(spec)
    observed = set(current or ())
    return desired - observed, observed - desired


def diff_pet(params: PetParameters, pet: Pet) -> PetDiff:
    """Compute the collection differences between desired and observed."""
    added_tags, removed_tags = diff_tags(params.tags, pet.tags)
    added_urls, removed_urls = diff_photo_urls(params.photo_urls, pet.photo_urls)
    return PetDiff(
        added_tags=added_tags,
        removed_tags=removed_tags,
        added_photo_urls=added_urls,
        removed_photo_urls=removed_urls,
    )


def is_category_up_to_date(params: PetParameters, pet: Pet) -> bool:
    """Check the desired category, if any, against the observed one."""
    if params.category is None:
        return True
    if pet.category is None:
        return False
    return (
        params.category.id == pet.category.id
        and params.category.name == pet.category.name
    )


def is_pet_up_to_date(params: PetParameters, pet: Pet) -> bool:
    """
    Check whether the observed pet matches the desired parameters.

    Names are compared exactly; a desired category must be present with the
    same id and name (a category the user did not ask for is ignored); tags
    and photo URLs must be equal as sets.
    """
    if params.name != pet.name:
        return False
    if not is_category_up_to_date(params, pet):
        return False
    return diff_pet(params, pet).empty
