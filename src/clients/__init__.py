"""
Pet store API clients.

The base client performs single-attempt JSON requests against the store and
classifies failures; the pet client implements the four pet operations.
"""

from clients.petstore import PetstoreClient, error_from_status
from clients.pet import Category, Pet, PetClient, PetStatus, Tag, generate_pet_id

__all__ = [
    "PetstoreClient",
    "error_from_status",
    "Category",
    "Pet",
    "PetClient",
    "PetStatus",
    "Tag",
    "generate_pet_id",
]
