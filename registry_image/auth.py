"""
Registry credentials and the pieces of the token auth handshake.

See https://docs.docker.com/registry/spec/auth/token/
"""
import base64
import binascii
import json
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional

from .exceptions import TokenParseError
from .parsing import ImageReference, normalize_registry_address, registry_address

LOGGER = logging.getLogger(__name__)


class Credentials(NamedTuple):
    username: str
    password: str


class CredentialTable(Mapping[str, Credentials]):
    """
    Read-only mapping of normalized registry address to credentials. Keys are
    normalized on construction; lookups are exact.
    """

    def __init__(self, creds: Optional[Mapping[str, Any]] = None) -> None:
        table: Dict[str, Credentials] = {}
        for address, cred in (creds or {}).items():
            table[normalize_registry_address(address)] = Credentials(*cred)
        self._table = MappingProxyType(table)

    @classmethod
    def from_docker_config(cls, config: Mapping[str, Any]) -> "CredentialTable":
        """
        Build a table from the "auths" section of a docker config.json.
        Entries without inline credentials are skipped.
        """
        creds: Dict[str, Credentials] = {}
        for host, entry in config.get("auths", {}).items():
            if entry.get("auth"):
                try:
                    decoded = base64.b64decode(entry["auth"]).decode("utf-8")
                except (binascii.Error, UnicodeDecodeError):
                    LOGGER.warning("Ignoring undecodable auth entry for %s", host)
                    continue
                user = parse_user(decoded)
                if user is not None:
                    creds[host] = user
            elif entry.get("username"):
                creds[host] = Credentials(entry["username"], entry.get("password", ""))
        return cls(creds)

    def __getitem__(self, address: str) -> Credentials:
        return self._table[address]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return "CredentialTable({})".format(sorted(self._table))


def parse_user(user: str) -> Optional[Credentials]:
    """
    Parses username and password in user:pass format.
    """
    if not user:
        return None

    col_pos = user.find(":")
    if col_pos == -1:
        return Credentials(user, "")
    return Credentials(user[0:col_pos], user[col_pos + 1 :])


def resolve_credentials(
    table: Mapping[str, Credentials], reference: ImageReference
) -> Optional[Credentials]:
    """
    Returns the credentials registered for the reference's registry, if any.
    """
    return table.get(registry_address(reference))


def encode_registry_auth(creds: Optional[Credentials]) -> str:
    """
    Encode credentials in the X-Registry-Auth header format. Anonymous access
    is encoded as an empty JSON object.
    """
    payload: Dict[str, str] = {}
    if creds is not None:
        payload = {"username": creds.username, "password": creds.password}
    return base64.urlsafe_b64encode(json.dumps(payload).encode("utf-8")).decode(
        "ascii"
    )


def _split_quote(s: str, dels: str, quotes: str = '"', escape: str = "\\") -> List[str]:
    """
    Split a challenge parameter list on the characters in dels, keeping quoted
    and escaped characters literal. Tokens and the delimiters that ended them
    alternate in the result, so its length is always odd.

    _split_quote('a="b,c",d=f', '=,') => ['a', '=', 'b,c', ',', 'd', '=', 'f']
    """
    part: List[str] = []
    result: List[str] = []

    quote = None
    for ch in s:
        if part and part[-1] == escape:
            part[-1] = ch
        elif quote and ch == quote:
            quote = None
        elif quote:
            part.append(ch)
        elif ch in dels:
            result.append("".join(part))
            result.append(ch)
            part.clear()
        elif ch in quotes:
            quote = ch
        else:
            part.append(ch)
    result.append("".join(part))

    return result


class BearerChallenge(NamedTuple):
    """
    Parameters of a WWW-Authenticate: Bearer header.
    """

    realm: str
    service: str
    scope: str


def is_bearer_challenge(header: str) -> bool:
    """
    Returns true if a WWW-Authenticate header asks for a bearer token.
    """
    return header.startswith("Bearer")


def parse_bearer_challenge(header: str) -> BearerChallenge:
    """
    Parse the comma separated key="value" pairs of a bearer challenge.
    """
    auth_parts = _split_quote(header[len("Bearer") :].strip(), "=,")
    params: Dict[str, str] = {}
    i = 0
    while i + 2 < len(auth_parts):
        if auth_parts[i + 1] != "=":
            # Bare token without a value; skip past its delimiter.
            i += 2
            continue
        params[auth_parts[i].strip().lower()] = auth_parts[i + 2]
        i += 4
    return BearerChallenge(
        realm=params.get("realm", ""),
        service=params.get("service", ""),
        scope=params.get("scope", ""),
    )


class BearerToken(NamedTuple):
    token: str

    def header(self) -> str:
        return "Bearer " + self.token


def parse_bearer_token(body: str) -> BearerToken:
    """
    Extract the token from a token endpoint response body. Some auth servers
    only return the OAuth2 style access_token field.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise TokenParseError("invalid token response: {}".format(exc)) from exc
    if not isinstance(data, dict):
        raise TokenParseError("token response is not a JSON object")

    token = data.get("token") or data.get("access_token")
    if not token or not isinstance(token, str):
        raise TokenParseError("token response has no token")
    return BearerToken(token)
