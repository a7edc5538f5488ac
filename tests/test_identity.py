import time

import pytest

from services.identity import SignedTokenVerifier, parse_bearer


@pytest.mark.parametrize(
    "header, expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("Bearer   abc  ", "abc"),
        ("Bearer ", None),
        ("Basic abc", None),
        ("bearer abc", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_bearer(header, expected):
    assert parse_bearer(header) == expected


def test_issued_token_verifies_to_subject():
    verifier = SignedTokenVerifier(secret="s3cret")
    assert verifier.verify(verifier.issue("alice")) == "alice"


def test_token_from_another_secret_is_rejected():
    token = SignedTokenVerifier(secret="one").issue("alice")
    assert SignedTokenVerifier(secret="two").verify(token) is None


def test_tampered_token_is_rejected():
    verifier = SignedTokenVerifier(secret="s3cret")
    token = verifier.issue("alice")
    tampered = token[:-2] + ("AA" if not token.endswith("AA") else "BB")
    assert verifier.verify(tampered) is None
    assert verifier.verify("not-a-token") is None
    assert verifier.verify(None) is None


def test_expired_token_is_rejected():
    verifier = SignedTokenVerifier(secret="s3cret", max_age=-1)
    token = verifier.issue("alice")
    time.sleep(0.01)
    assert verifier.verify(token) is None


def test_issue_requires_subject():
    with pytest.raises(ValueError):
        SignedTokenVerifier().issue("")
