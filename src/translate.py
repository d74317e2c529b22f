"""
Translation between desired Pet parameters and the store's wire format.
"""

from clients.pet import Category, Pet, Tag
from errors import ErrorKind, PetstoreError
from models import PetObservation, PetParameters


def generate_pet(params: PetParameters) -> Pet:
    """
    Build the complete request payload for the desired parameters.

    Identity and status are left unset; the client assigns them on create.
    Collections are sorted so equal parameters always encode identically.
    """
    tags = [
        Tag(id=t.id, name=t.name)
        for t in sorted(params.tags, key=lambda t: (t.id, t.name))
    ]
    category = None
    if params.category is not None:
        category = Category(id=params.category.id, name=params.category.name)

    return Pet(
        name=params.name,
        category=category,
        tags=tags,
        photo_urls=sorted(params.photo_urls),
    )


def generate_pet_observation(pet: Pet) -> PetObservation:
    """
    Project a fetched pet onto its observable fields.

    Raises:
        PetstoreError: MALFORMED_RESOURCE if the pet has no id.
    """
    if pet.id is None:
        raise PetstoreError(
            ErrorKind.MALFORMED_RESOURCE, f"pet '{pet.name}' returned without an id"
        )
    return PetObservation(id=pet.id, status=pet.status)
