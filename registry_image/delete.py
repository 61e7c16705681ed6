"""
Module implementing manifest deletion against the v2 docker registry API,
including the bearer token challenge issued by registries such as docker.io.

See https://docs.docker.com/registry/spec/api/#deleting-an-image
and https://docs.docker.com/registry/spec/auth/token/
"""
import enum
import logging
from typing import Dict, Optional, Tuple
import urllib.parse

import requests

from .auth import (
    BearerChallenge,
    BearerToken,
    Credentials,
    is_bearer_challenge,
    parse_bearer_challenge,
    parse_bearer_token,
)
from .config import tls_verify
from .exceptions import (
    BadCredentialsError,
    RegistryRejectedError,
    RegistryTransportError,
    TokenFetchError,
    TokenParseError,
)

LOGGER = logging.getLogger(__name__)


class DeleteState(enum.Enum):
    INITIAL = "initial"
    RETRYING = "retrying"


def _status_line(resp: requests.Response) -> str:
    return "{} {}".format(resp.status_code, resp.reason)


class ManifestDeleteClient:
    """
    Deletes a single manifest from a registry. At most two DELETE requests
    are made: the initial one and, after a bearer challenge, one retry
    carrying the bearer token.
    """

    # The retried request is also accepted with 200, which some registries
    # answer instead of the documented 202.
    INITIAL_SUCCESS = (202, 404)
    RETRY_SUCCESS = (200, 202)

    def __init__(
        self,
        registry: str,
        repository: str,
        digest: str,
        credentials: Optional[Credentials] = None,
        verify: bool = True,
    ) -> None:
        self.registry = registry
        self.repository = repository
        self.digest = digest
        self.credentials = credentials
        self.verify = verify
        self.state = DeleteState.INITIAL

    def __str__(self) -> str:
        return "{}/{}@{}".format(self.registry, self.repository, self.digest)

    def url(self) -> str:
        """
        Returns the manifest url to delete.
        """
        return "https://{}/v2/{}/manifests/{}".format(
            self.registry, self.repository, self.digest
        )

    def _basic_auth(self) -> Optional[Tuple[str, str]]:
        if self.credentials is None or not self.credentials.username:
            return None
        return (self.credentials.username, self.credentials.password)

    def _error(self, exc_type, message: str, resp: Optional[requests.Response] = None):
        return exc_type(
            message,
            registry=self.registry,
            repository=self.repository,
            status=_status_line(resp) if resp is not None else None,
        )

    def _request(
        self,
        session: requests.Session,
        method: str,
        url: str,
        *,
        auth: Optional[Tuple[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        try:
            return session.request(
                method, url, auth=auth, headers=headers or {}, verify=self.verify
            )
        except requests.RequestException as exc:
            raise self._error(
                RegistryTransportError,
                "error during registry request {} {}: {}".format(method, url, exc),
            ) from exc

    def delete(self) -> None:
        """
        Delete the manifest. A manifest that is already gone counts as
        deleted.
        """
        # The session ignores the environment so netrc credentials never
        # replace the resolved basic auth or the bearer header.
        with requests.Session() as session:
            session.trust_env = False
            self._delete(session)

    def _delete(self, session: requests.Session) -> None:
        self.state = DeleteState.INITIAL
        resp = self._request(session, "DELETE", self.url(), auth=self._basic_auth())

        if resp.status_code in self.INITIAL_SUCCESS:
            if resp.status_code == 404:
                LOGGER.info("Manifest %s already absent", self)
            else:
                LOGGER.info("Deleted manifest %s", self)
            return

        if resp.status_code != 401:
            raise self._error(
                RegistryRejectedError, "got bad response from registry", resp
            )

        www_auth = resp.headers.get("WWW-Authenticate", "")
        if not is_bearer_challenge(www_auth):
            raise self._error(BadCredentialsError, "bad credentials", resp)

        self.state = DeleteState.RETRYING
        token = self.fetch_token(session, parse_bearer_challenge(www_auth))
        resp = self._request(
            session, "DELETE", self.url(), headers={"Authorization": token.header()}
        )
        if resp.status_code not in self.RETRY_SUCCESS:
            raise self._error(
                RegistryRejectedError, "got bad response from registry", resp
            )
        LOGGER.info("Deleted manifest %s", self)

    def fetch_token(
        self, session: requests.Session, challenge: BearerChallenge
    ) -> BearerToken:
        """
        Request a bearer token from the challenge realm using the basic auth
        credentials, if any.
        """
        if not challenge.realm:
            raise self._error(TokenFetchError, "bearer challenge has no realm")

        query = urllib.parse.urlencode(
            [("service", challenge.service), ("scope", challenge.scope)]
        )
        separator = "&" if "?" in challenge.realm else "?"
        token_url = challenge.realm + separator + query
        LOGGER.debug("Fetching bearer token for %s from %s", self, challenge.realm)

        resp = self._request(session, "GET", token_url, auth=self._basic_auth())
        if resp.status_code != 200:
            raise self._error(
                TokenFetchError, "got bad response from token endpoint", resp
            )

        try:
            return parse_bearer_token(resp.text)
        except TokenParseError as exc:
            raise self._error(TokenParseError, exc.message, resp) from exc


def remove_registry_image(
    registry: str,
    repository: str,
    digest: str,
    credentials: Optional[Credentials] = None,
    verify: Optional[bool] = None,
) -> None:
    """
    Delete a manifest by digest. When verify is not given the insecure TLS
    environment switch is consulted.
    """
    if verify is None:
        verify = tls_verify()
    ManifestDeleteClient(
        registry, repository, digest, credentials=credentials, verify=verify
    ).delete()
