import pytest

from app.core.security import (
    generate_session_token,
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)


def test_hash_is_salted_and_verifies():
    first = hash_password("admin123")
    second = hash_password("admin123")

    assert first != second
    assert verify_password("admin123", first)
    assert verify_password("admin123", second)


def test_wrong_password_does_not_verify():
    hashed = hash_password("admin123")
    assert verify_password("wrongpass", hashed) is False


def test_cost_factor_comes_from_settings():
    # conftest sets BCRYPT_ROUNDS=4; production default is 12
    assert hash_password("x").startswith("$2b$04$")


@pytest.mark.parametrize("bad_hash", [None, "", "short", "x" * 60, "$2b$12$" + "!" * 53])
def test_missing_or_malformed_hash_is_a_failure_not_an_exception(bad_hash):
    assert verify_password("anything", bad_hash) is False


def test_session_tokens_are_long_and_unique():
    tokens = {generate_session_token() for _ in range(200)}
    assert len(tokens) == 200
    # 32 random bytes → 43 url-safe base64 chars
    assert all(len(t) >= 43 for t in tokens)


@pytest.mark.anyio
async def test_async_verify_runs_in_worker_thread():
    hashed = hash_password("admin123")
    assert await verify_password_async("admin123", hashed) is True
    assert await verify_password_async("nope", hashed) is False


@pytest.mark.anyio
async def test_async_hash_verifies_with_sync_verify():
    hashed = await hash_password_async("teacher123")
    assert hashed.startswith("$2b$04$")
    assert verify_password("teacher123", hashed)
