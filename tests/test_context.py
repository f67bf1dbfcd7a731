"""Test context functionality."""

import pytest

from webmux.context import Context, Env, EnvKey


def test_context_starts_empty():
    """New contexts hold no parameters and an empty env."""
    c = Context()
    assert c.url_params == {}
    assert len(c.env) == 0
    assert Context().env is not c.env


def test_env_keys_compare_by_identity():
    """Keys with the same name are distinct capabilities."""
    first = EnvKey("pkg", "user")
    second = EnvKey("pkg", "user")
    c = Context()

    first.set(c, "carl")
    assert first.get(c) == "carl"
    assert not second.isset(c)
    assert second.get(c, None) is None
    assert repr(first) == "<EnvKey pkg.user>"


def test_env_key_defaults():
    """Missing values fall back to the call or key default."""
    c = Context()
    key = EnvKey("pkg", "count", default=0)
    assert key.get(c) == 0
    assert key.get(c, 5) == 5

    bare = EnvKey("pkg", "bare")
    with pytest.raises(KeyError):
        bare.get(c)


def test_env_key_delete():
    """Deleting a key removes it from the env."""
    c = Context()
    key = EnvKey("pkg", "token")
    key.set(c, "abc")
    assert key.isset(c)

    key.delete(c)
    assert not key.isset(c)
    key.delete(c)


def test_env_rejects_foreign_keys():
    """Only EnvKey tokens may be stored."""
    env = Env()
    with pytest.raises(TypeError):
        env["user"] = "carl"

    key = EnvKey("pkg", "user")
    env = Env({key: "carl"})
    assert env[key] == "carl"
    assert list(env) == [key]
    del env[key]
    assert key not in env


def test_context_assign_and_clear():
    """assign shares the other context's maps; clear starts over."""
    key = EnvKey("pkg", "user")
    source = Context(url_params={"id": "1"})
    key.set(source, "carl")

    box = Context()
    box.assign(source)
    assert box.url_params is source.url_params
    assert key.get(box) == "carl"

    box.env[EnvKey("pkg", "other")] = 1
    assert len(source.env) == 2

    box.clear()
    assert box.url_params == {}
    assert len(box.env) == 0
    assert source.url_params == {"id": "1"}
