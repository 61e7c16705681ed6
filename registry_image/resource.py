"""
Create, update and delete operations for a pushed registry image. The caller
decides when each runs and stores the returned RegistryImage.
"""
import logging
from typing import Mapping, NamedTuple, Optional, Tuple

import docker

from .auth import Credentials, resolve_credentials
from .delete import remove_registry_image
from .parsing import parse_image_name, registry_host, remote_repository
from .push import push_image

LOGGER = logging.getLogger(__name__)


class RegistryImage(NamedTuple):
    """
    Declared inputs and recorded state of a registry image.
    """

    name: str
    keep_remote: bool = False
    push_triggers: Tuple[str, ...] = ()
    digest: Optional[str] = None


def create_registry_image(
    api: docker.APIClient,
    credentials: Mapping[str, Credentials],
    image: RegistryImage,
) -> RegistryImage:
    """
    Push the image and record the digest the registry stored it under.
    """
    digest = push_image(api, credentials, image.name)
    if digest is None:
        LOGGER.warning("Engine reported no digest for %s", image.name)
    return image._replace(digest=digest)


def update_registry_image(
    image: RegistryImage, keep_remote: Optional[bool] = None
) -> RegistryImage:
    """
    Only keep_remote can change in place; anything else forces a new push.
    """
    if keep_remote is None:
        return image
    return image._replace(keep_remote=keep_remote)


def delete_registry_image(
    credentials: Mapping[str, Credentials],
    image: RegistryImage,
    verify: Optional[bool] = None,
) -> None:
    """
    Delete the pushed manifest from the registry unless keep_remote is set.
    """
    if image.keep_remote:
        LOGGER.info("Keeping remote image %s", image.name)
        return

    reference = parse_image_name(image.name)
    ref = image.digest or reference.ref()
    remove_registry_image(
        registry_host(reference),
        remote_repository(reference),
        ref,
        credentials=resolve_credentials(credentials, reference),
        verify=verify,
    )
