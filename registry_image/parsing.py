"""
Parsing and normalization of container image references.

urllib.parse does not work appropriately for image names, so references are
matched against a small grammar instead:

    [registry "/"] repository [":" tag] ["@" digest]
"""
import re
from typing import NamedTuple, Optional

from .exceptions import InvalidReferenceError

DEFAULT_REGISTRY = "registry.hub.docker.com"
DEFAULT_NAMESPACE = "library"
DEFAULT_TAG = "latest"

_DIGEST_LENGTHS = {"sha256": 64, "sha384": 96, "sha512": 128}

_REFERENCE_RE = re.compile(
    r"""
    (?:(?P<registry>
        [a-zA-Z][a-zA-Z0-9+.-]*://[^/]*
        |localhost(?::[^/@]*)?
        |[^/@.:]*[.:][^/@]*
    )/(?=.))?
    (?P<repository>[^@]*?)
    (?::(?P<tag>[^:/@]*))?
    (?:@(?P<digest>.*))?
    """,
    re.VERBOSE | re.DOTALL,
)


class ImageReference(NamedTuple):
    """
    A parsed image reference. registry is empty when the reference addresses
    the default public registry.
    """

    registry: str
    repository: str
    tag: Optional[str]
    digest: Optional[str]

    def name(self) -> str:
        """
        Returns the image name without tag or digest.
        """
        if self.registry:
            return self.registry + "/" + self.repository
        return self.repository

    def ref(self) -> str:
        """
        Returns the identifier used to address the manifest. A digest takes
        precedence over a tag.
        """
        return self.digest or self.tag or DEFAULT_TAG

    def __str__(self) -> str:
        result = self.name()
        if self.tag:
            result += ":" + self.tag
        if self.digest:
            result += "@" + self.digest
        return result


def is_digest(ref: str) -> bool:
    """
    Returns true if ref is a well formed content digest.
    """
    algorithm, _, hex_part = ref.partition(":")
    length = _DIGEST_LENGTHS.get(algorithm)
    if length is None:
        return False
    return bool(re.fullmatch("[0-9a-f]{%d}" % length, hex_part))


def parse_image_name(name: str) -> ImageReference:
    """
    Extract out the registry host, repository, tag and digest from an image
    string. Only a malformed digest suffix is rejected.
    """
    match = _REFERENCE_RE.fullmatch(name)
    if match is None:
        raise InvalidReferenceError("unparseable image reference {!r}".format(name))

    digest = match.group("digest")
    if digest is not None and not is_digest(digest):
        raise InvalidReferenceError(
            "malformed digest {!r} in image reference {!r}".format(digest, name)
        )

    tag = match.group("tag") or None
    if tag is None and digest is None:
        tag = DEFAULT_TAG

    return ImageReference(
        registry=match.group("registry") or "",
        repository=match.group("repository"),
        tag=tag,
        digest=digest,
    )


def normalize_registry_address(registry: str) -> str:
    """
    Returns the scheme qualified address used as a credential table key.
    """
    if not registry:
        registry = DEFAULT_REGISTRY
    if registry.startswith("https://") or registry.startswith("http://"):
        return registry
    return "https://" + registry


def registry_address(reference: ImageReference) -> str:
    """
    Returns the credential table key for the reference's registry.
    """
    return normalize_registry_address(reference.registry)


def registry_host(reference: ImageReference) -> str:
    """
    Returns host[:port] of the registry holding the reference, without any
    scheme.
    """
    registry = reference.registry or DEFAULT_REGISTRY
    scheme_end = registry.find("://")
    if scheme_end != -1:
        registry = registry[scheme_end + 3 :]
    return registry


def remote_repository(reference: ImageReference) -> str:
    """
    Returns the repository path as the registry addresses it. Bare images on
    the default registry live under the library namespace, e.g. consul
    becomes library/consul.
    """
    repository = reference.repository
    if registry_host(reference) == DEFAULT_REGISTRY and "/" not in repository:
        repository = DEFAULT_NAMESPACE + "/" + repository
    return repository
