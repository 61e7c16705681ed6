"""
Environment configuration: the insecure TLS switch, the docker engine handle
and the docker client config file.
"""
import json
import logging
import os
from typing import Any, Mapping, Optional

import docker

from .auth import CredentialTable

LOGGER = logging.getLogger(__name__)

INSECURE_TLS_ENV = "REGISTRY_IMAGE_INSECURE"


def insecure_tls_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Returns true if the insecure TLS switch is set to an integer >= 1.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(INSECURE_TLS_ENV)
    if value is None:
        return False
    try:
        return int(value) >= 1
    except ValueError:
        return False


def tls_verify(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Returns the requests verify setting to use for registry calls.
    """
    if insecure_tls_enabled(environ):
        LOGGER.warning("TLS certificate verification disabled by %s", INSECURE_TLS_ENV)
        return False
    return True


def engine_from_env(**kwargs: Any) -> docker.APIClient:
    """
    Returns a low level docker engine client configured from DOCKER_HOST,
    DOCKER_TLS_VERIFY and DOCKER_CERT_PATH.
    """
    client_kwargs = docker.utils.kwargs_from_env()
    client_kwargs.update(kwargs)
    return docker.APIClient(**client_kwargs)


def docker_config_path() -> str:
    config_dir = os.environ.get("DOCKER_CONFIG") or os.path.join(
        os.path.expanduser("~"), ".docker"
    )
    return os.path.join(config_dir, "config.json")


def load_docker_config(path: Optional[str] = None) -> CredentialTable:
    """
    Load a credential table from a docker config.json. A missing file yields
    an empty table.
    """
    path = path or docker_config_path()
    try:
        with open(path, "r") as fconfig:
            config = json.load(fconfig)
    except FileNotFoundError:
        LOGGER.debug("No docker config at %s", path)
        return CredentialTable()
    return CredentialTable.from_docker_config(config)
