"""
Expose public registry_image interface
"""
from .auth import (
    BearerChallenge,
    BearerToken,
    CredentialTable,
    Credentials,
    encode_registry_auth,
    parse_bearer_challenge,
    parse_user,
    resolve_credentials,
)
from .config import engine_from_env, load_docker_config, tls_verify
from .delete import DeleteState, ManifestDeleteClient, remove_registry_image
from .exceptions import (
    BadCredentialsError,
    ErrorKind,
    InvalidReferenceError,
    PushFailedError,
    RegistryException,
    RegistryRejectedError,
    RegistryTransportError,
    TokenFetchError,
    TokenParseError,
)
from .parsing import (
    ImageReference,
    normalize_registry_address,
    parse_image_name,
    registry_address,
    registry_host,
    remote_repository,
)
from .push import PushEvent, iter_push_events, push_image
from .resource import (
    RegistryImage,
    create_registry_image,
    delete_registry_image,
    update_registry_image,
)
