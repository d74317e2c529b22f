"""
External Pet - Observe, create, update and delete a pet in the store.

Similar to a Kubernetes managed-resource external client: each
reconciliation cycle observes the pet bound to a resource, and the caller
then creates, updates or leaves it alone based on what was observed. The
binding between a resource and its pet (the external name) is stored by the
caller on the resource itself.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from clients.pet import PetClient
from config import PetstoreConfig
from diff import is_pet_up_to_date
from errors import ErrorKind, PetstoreError, is_not_found
from models import PetObservation, PetParameters
from translate import generate_pet, generate_pet_observation

logger = logging.getLogger(__name__)

PET_RESOURCE_TYPE = "Pet"
EXTERNAL_NAME_ANNOTATION = "petstore.io/external-name"


class ObservationState(Enum):
    """Where a resource stands relative to its pet in the store."""

    NO_IDENTITY = "no_identity"
    ABSENT = "absent"
    EXISTS_UP_TO_DATE = "exists_up_to_date"
    EXISTS_STALE = "exists_stale"


@dataclass
class ExternalObservation:
    """Result of observing the pet bound to a resource."""

    state: ObservationState
    observation: Optional[PetObservation] = None

    @property
    def exists(self) -> bool:
        return self.state in (
            ObservationState.EXISTS_UP_TO_DATE,
            ObservationState.EXISTS_STALE,
        )

    @property
    def up_to_date(self) -> bool:
        return self.state is ObservationState.EXISTS_UP_TO_DATE


def _check_resource_type(resource: Dict[str, Any]) -> None:
    resource_type = resource.get("resource_type_name")
    if resource_type != PET_RESOURCE_TYPE:
        raise PetstoreError(
            ErrorKind.WRONG_RESOURCE_TYPE,
            f"resource '{resource.get('name')}' is a {resource_type}, "
            f"not a {PET_RESOURCE_TYPE}",
        )


def get_pet_parameters(resource: Dict[str, Any]) -> PetParameters:
    """
    Read the desired pet parameters from a resource.

    Raises:
        PetstoreError: WRONG_RESOURCE_TYPE if the resource is not a Pet,
            MALFORMED_RESOURCE if its spec is not valid pet parameters.
    """
    _check_resource_type(resource)
    try:
        return PetParameters.model_validate(resource.get("spec") or {})
    except ValidationError as e:
        raise PetstoreError(
            ErrorKind.MALFORMED_RESOURCE,
            f"invalid spec for pet resource '{resource.get('name')}': {e}",
        ) from e


def get_external_name(resource: Dict[str, Any]) -> Optional[str]:
    """Get the external name bound to a resource, or None if unbound."""
    annotations = (resource.get("metadata") or {}).get("annotations") or {}
    return annotations.get(EXTERNAL_NAME_ANNOTATION) or None


def set_external_name(resource: Dict[str, Any], name: str) -> None:
    """Bind an external name to a resource dict in place."""
    metadata = resource.get("metadata") or {}
    annotations = metadata.get("annotations") or {}
    annotations[EXTERNAL_NAME_ANNOTATION] = name
    metadata["annotations"] = annotations
    resource["metadata"] = metadata


class ExternalPet:
    """
    Drives one pet in the store toward its desired parameters.

    Holds no state of its own between calls; the service may be shared by
    many ExternalPet instances.
    """

    def __init__(self, service: PetClient):
        self.service = service

    async def observe(
        self, params: PetParameters, external_name: Optional[str]
    ) -> ExternalObservation:
        """
        Observe the pet bound to a resource.

        Makes at most one call to the store: none when the resource is
        unbound, otherwise a single fetch.

        Args:
            params: Desired pet parameters
            external_name: The bound external name, if any

        Returns:
            ExternalObservation with the state and, when the pet exists, its
            observed id and status.

        Raises:
            PetstoreError: Any fetch failure other than NOT_FOUND, unchanged,
                or MALFORMED_RESOURCE if the fetched pet has no id.
        """
        if not external_name:
            return ExternalObservation(state=ObservationState.NO_IDENTITY)

        try:
            pet = await self.service.get_pet_by_id(external_name)
        except PetstoreError as e:
            if is_not_found(e):
                logger.info(f"Pet {external_name} does not exist in the store")
                return ExternalObservation(state=ObservationState.ABSENT)
            raise

        observation = generate_pet_observation(pet)

        if is_pet_up_to_date(params, pet):
            state = ObservationState.EXISTS_UP_TO_DATE
        else:
            state = ObservationState.EXISTS_STALE

        return ExternalObservation(state=state, observation=observation)

    async def create(self, params: PetParameters) -> str:
        """
        Create the pet and return the external name to bind.

        Raises:
            PetstoreError: CREATE_FAILED wrapping the underlying error.
        """
        try:
            pet = await self.service.add_pet(generate_pet(params))
        except PetstoreError as e:
            raise PetstoreError.wrap(
                ErrorKind.CREATE_FAILED, "cannot create pet", e
            ) from e

        external_name = str(pet.id)
        logger.info(f"Created pet '{params.name}' with id {external_name}")
        return external_name

    async def update(self, external_name: str, params: PetParameters) -> None:
        """
        Replace the pet with the complete desired state.

        Raises:
            PetstoreError: UPDATE_FAILED wrapping the underlying error.
        """
        try:
            await self.service.update_pet_by_id(external_name, generate_pet(params))
        except PetstoreError as e:
            raise PetstoreError.wrap(
                ErrorKind.UPDATE_FAILED, "cannot update pet", e
            ) from e

        logger.info(f"Updated pet {external_name}")

    async def delete(self, external_name: str) -> None:
        """
        Delete the pet. A pet that is already gone counts as deleted.

        Raises:
            PetstoreError: DELETE_FAILED wrapping any error except NOT_FOUND.
        """
        try:
            await self.service.delete_pet_by_id(external_name)
        except PetstoreError as e:
            if is_not_found(e):
                logger.info(f"Pet {external_name} already deleted")
                return
            raise PetstoreError.wrap(
                ErrorKind.DELETE_FAILED, "cannot delete pet", e
            ) from e

        logger.info(f"Deleted pet {external_name}")


def connect(
    resource: Dict[str, Any],
    config: PetstoreConfig,
    new_client: Callable[[str], PetClient] = PetClient,
) -> ExternalPet:
    """
    Produce an ExternalPet for a resource.

    The resource's plugin_config.server_url, when set, takes precedence over
    the configured server URL.

    Raises:
        PetstoreError: WRONG_RESOURCE_TYPE if the resource is not a Pet.
    """
    _check_resource_type(resource)
    plugin_config = resource.get("plugin_config") or {}
    server_url = plugin_config.get("server_url") or config.server_url
    return ExternalPet(new_client(server_url))
