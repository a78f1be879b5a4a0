"""Tag repair — tag the registry commit that already holds the pushed content.

When a push is rejected because identical content already exists on the
track (a retried or concurrent run got there first), the git commit is still
recorded by creating a tag named after it on the track's head.
"""

from __future__ import annotations

import logging

from trackpush.errors import ErrorCode, RegistryError
from trackpush.registry.client import RegistryService
from trackpush.registry.models import ModuleIdentity, RepositoryTag

logger = logging.getLogger(__name__)


def tag_existing_commit(
    registry: RegistryService,
    identity: ModuleIdentity,
    tag_name: str,
    reference: str,
) -> RepositoryTag:
    """Create tag ``tag_name`` on the commit ``reference`` resolves to.

    Raises:
        RegistryError: The repository or reference is missing, or the tag
            already exists on different content.
    """
    try:
        repository = registry.get_repository_by_full_name(identity.full_name)
    except RegistryError as e:
        if e.code == ErrorCode.NOT_FOUND:
            raise RegistryError(
                e.code, f'a repository named "{identity.identity_string}" does not exist'
            ) from e
        raise

    logger.debug("tagging %s:%s as %s", identity.identity_string, reference, tag_name)
    try:
        return registry.create_repository_tag(repository.id, tag_name, reference)
    except RegistryError as e:
        if e.code == ErrorCode.NOT_FOUND:
            raise RegistryError(
                e.code, f"{identity.identity_string}:{reference} does not exist"
            ) from e
        if e.code == ErrorCode.ALREADY_EXISTS:
            raise RegistryError(
                e.code,
                f"{identity.identity_string}:{tag_name} already exists with different content",
            ) from e
        raise
