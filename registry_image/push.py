"""
Push a locally built image to its registry through the docker engine API.

See https://docs.docker.com/engine/api/v1.41/#operation/ImagePush
"""
import contextlib
import json
import logging
from typing import Any, Dict, Iterator, Mapping, NamedTuple, Optional
import urllib.parse

import docker
import requests

from .auth import Credentials, encode_registry_auth, resolve_credentials
from .exceptions import PushFailedError, RegistryTransportError
from .parsing import ImageReference, parse_image_name, registry_host

LOGGER = logging.getLogger(__name__)


class PushEvent(NamedTuple):
    """
    A single progress record from the push stream.
    """

    status: str
    progress: str
    error: str
    digest: Optional[str]
    record: Dict[str, Any]

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PushEvent":
        error_detail = record.get("errorDetail") or {}
        aux = record.get("aux") or {}
        return cls(
            status=record.get("status", ""),
            progress=record.get("progress", ""),
            error=error_detail.get("message") or record.get("error") or "",
            digest=aux.get("Digest"),
            record=record,
        )


def iter_push_events(
    response: requests.Response, registry: str = "", repository: str = ""
) -> Iterator[PushEvent]:
    """
    Lazily decode the newline delimited JSON records of a push response.
    The stream can only be consumed once. registry and repository are attached
    to the error raised for a malformed record.
    """
    for line in response.iter_lines():
        if not line:
            continue
        try:
            record = json.loads(line)
        except ValueError as exc:
            raise PushFailedError(
                "malformed push progress record: {!r}".format(line),
                registry=registry,
                repository=repository,
            ) from exc
        yield PushEvent.from_record(record)


def _push_url(api: docker.APIClient, reference: ImageReference) -> str:
    return "{}/v{}/images/{}/push".format(
        api.base_url,
        api.api_version,
        urllib.parse.quote(reference.name(), safe="/:"),
    )


def _start_push(
    api: docker.APIClient, reference: ImageReference, registry_auth: str
) -> requests.Response:
    """
    Initiate the push and return the open streaming response.
    """
    try:
        resp = api.post(
            _push_url(api, reference),
            params={"tag": reference.tag},
            headers={"X-Registry-Auth": registry_auth},
            stream=True,
        )
    except requests.RequestException as exc:
        raise RegistryTransportError(
            "error contacting docker engine: {}".format(exc),
            registry=registry_host(reference),
            repository=reference.repository,
        ) from exc

    if resp.status_code >= 400:
        with contextlib.closing(resp):
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = resp.text
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
        raise PushFailedError(
            "error pushing image {}: {}".format(reference, message),
            registry=registry_host(reference),
            repository=reference.repository,
            status="{} {}".format(resp.status_code, resp.reason),
        )
    return resp


def push_image(
    api: docker.APIClient, credentials: Mapping[str, Credentials], name: str
) -> Optional[str]:
    """
    Push the image called name and return the manifest digest reported by the
    engine, if any. Anonymous pushes are attempted when no credentials match.
    """
    reference = parse_image_name(name)
    if reference.tag is None:
        # The engine pushes by tag; without one it would push every local tag.
        raise PushFailedError(
            "cannot push {} by digest, a tag is required".format(reference),
            registry=registry_host(reference),
            repository=reference.repository,
        )

    creds = resolve_credentials(credentials, reference)
    if creds is None:
        LOGGER.debug("No credentials for %s, pushing anonymously", reference)

    resp = _start_push(api, reference, encode_registry_auth(creds))

    digest = None
    with contextlib.closing(resp):
        try:
            for event in iter_push_events(
                resp, registry_host(reference), reference.repository
            ):
                if event.error:
                    raise PushFailedError(
                        event.error,
                        registry=registry_host(reference),
                        repository=reference.repository,
                    )
                if event.digest:
                    digest = event.digest
                LOGGER.debug("%s: %s %s", reference, event.status, event.progress)
        except requests.RequestException as exc:
            raise RegistryTransportError(
                "push stream interrupted: {}".format(exc),
                registry=registry_host(reference),
                repository=reference.repository,
            ) from exc

    LOGGER.info("Pushed image %s (%s)", reference, digest or "no digest reported")
    return digest
