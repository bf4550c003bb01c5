"""
Tests for the server token wrapper
"""

import pickle

import pytest

from postmark_client.utils.credentials import MASK, ServerToken


def test_expose_secret_returns_raw_value():
    assert ServerToken("abc-123").expose_secret() == "abc-123"


@pytest.mark.parametrize("render", [str, repr, lambda t: f"{t}", lambda t: "%s" % t, lambda t: f"{t:>12}"])
def test_every_rendering_is_masked(render):
    assert "abc-123" not in render(ServerToken("abc-123"))
    assert MASK.strip() in render(ServerToken("abc-123"))


def test_repr_shape():
    assert repr(ServerToken("x")) == "ServerToken('**********')"


def test_is_empty():
    assert ServerToken("").is_empty()
    assert ServerToken("  ").is_empty()
    assert not ServerToken("t").is_empty()


def test_equality_uses_value():
    assert ServerToken("a") == ServerToken("a")
    assert ServerToken("a") != ServerToken("b")
    assert len({ServerToken("a"), ServerToken("a")}) == 1


def test_rejects_non_string():
    with pytest.raises(TypeError):
        ServerToken(b"bytes-token")


def test_cannot_be_pickled():
    with pytest.raises(TypeError):
        pickle.dumps(ServerToken("abc-123"))


def test_is_immutable_slot_holder():
    with pytest.raises(AttributeError):
        ServerToken("a").other = 1
