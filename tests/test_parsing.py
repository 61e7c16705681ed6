"""
Tests for the registry_image.parsing module
"""
import unittest

from registry_image.auth import CredentialTable, resolve_credentials
from registry_image.exceptions import ErrorKind, InvalidReferenceError
from registry_image.parsing import (
    ImageReference,
    normalize_registry_address,
    parse_image_name,
    registry_address,
    registry_host,
    remote_repository,
)

DIGEST = "sha256:9b1702dcfe32c873a770a32cfd306dd7fc1c4fd134adfb783db68defc8894b3c"


class ParsingTest(unittest.TestCase):
    """
    registry_image.parsing tests
    """

    def _check_image(self, name, registry, repository, tag="latest", digest=None):
        """
        Test assertions an image name parse.
        """
        self.assertEqual(
            parse_image_name(name),
            ImageReference(registry, repository, tag, digest),
        )

    def test_parse_image_ref_handling(self) -> None:
        """Test handling of tags and digests"""
        self._check_image("repo", "", "repo")
        self._check_image("ubuntu:18.04", "", "ubuntu", tag="18.04")
        self._check_image("ubuntu@" + DIGEST, "", "ubuntu", tag=None, digest=DIGEST)
        self._check_image(
            "ubuntu:18.04@" + DIGEST, "", "ubuntu", tag="18.04", digest=DIGEST
        )
        self._check_image(
            "cbir.clinc.ai/clinc/worker/gpu:v0.7.9",
            "cbir.clinc.ai",
            "clinc/worker/gpu",
            tag="v0.7.9",
        )
        self._check_image("host.tld/ns/repo:tag", "host.tld", "ns/repo", tag="tag")

    def test_parse_image_registry_handling(self) -> None:
        """Test detection of the registry segment"""
        self._check_image("localhost/msg", "localhost", "msg")
        self._check_image("notahost/msg", "", "notahost/msg")
        self._check_image("isa.host/msg", "isa.host", "msg")
        self._check_image("host:5000/repo", "host:5000", "repo")
        self._check_image("localhost:5000/repo:v1", "localhost:5000", "repo", tag="v1")
        self._check_image("https://isahost/msg", "https://isahost", "msg")
        # A lone hostname-like token is still a repository.
        self._check_image("isa.host", "", "isa.host")

    def test_parse_unusual_names(self) -> None:
        """Unusual names parse to something rather than failing"""
        self._check_image("", "", "")
        self._check_image("repo:", "", "repo")
        self._check_image("ns/UPPER_case/x", "", "ns/UPPER_case/x")
        # Long runs of separators without a slash parse in linear time.
        self._check_image("a" + ":" * 8000, "", "a" + ":" * 7999)
        self._check_image("h." * 4000 + "x:1", "", "h." * 4000 + "x", tag="1")

    def test_invalid_digest(self) -> None:
        """Only malformed digests are rejected"""
        for name in (
            "repo@sha256:abc",
            "repo@sha256:" + "G" * 64,
            "repo@md5:" + "a" * 32,
            "repo@latest",
        ):
            with self.assertRaises(InvalidReferenceError) as ctx:
                parse_image_name(name)
            self.assertEqual(ctx.exception.kind, ErrorKind.INVALID_REFERENCE)

    def test_normalization(self) -> None:
        """Test credential table key normalization"""
        self.assertEqual(
            normalize_registry_address(""), "https://registry.hub.docker.com"
        )
        self.assertEqual(normalize_registry_address("test.io"), "https://test.io")
        self.assertEqual(
            normalize_registry_address("http://test.io"), "http://test.io"
        )
        self.assertEqual(
            registry_address(parse_image_name("consul")),
            registry_address(parse_image_name("registry.hub.docker.com/library/consul")),
        )

        table = CredentialTable({"registry.hub.docker.com": ("user", "pass")})
        self.assertEqual(
            resolve_credentials(table, parse_image_name("consul")),
            resolve_credentials(
                table, parse_image_name("registry.hub.docker.com/library/consul")
            ),
        )

    def test_remote_repository(self) -> None:
        """Bare default registry images live in the library namespace"""
        consul = parse_image_name("consul")
        self.assertEqual(registry_host(consul), "registry.hub.docker.com")
        self.assertEqual(remote_repository(consul), "library/consul")
        self.assertEqual(
            remote_repository(parse_image_name("hashicorp/consul")), "hashicorp/consul"
        )
        private = parse_image_name("https://isa.host/msg")
        self.assertEqual(registry_host(private), "isa.host")
        self.assertEqual(remote_repository(private), "msg")

    def test_render(self) -> None:
        """Test rendering a reference back to a string"""
        ref = parse_image_name("host:5000/ns/repo:v1")
        self.assertEqual(ref.name(), "host:5000/ns/repo")
        self.assertEqual(str(ref), "host:5000/ns/repo:v1")
        self.assertEqual(parse_image_name("repo@" + DIGEST).ref(), DIGEST)


if __name__ == "__main__":
    unittest.main()
