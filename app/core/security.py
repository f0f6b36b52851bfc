import secrets

import anyio
from passlib.context import CryptContext

from app.core.config import settings

# ── Bcrypt Password Hashing ───────────────────────────────────────────
# "deprecated=auto" → old hashes are silently re-hashed on next login
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Constant-time dummy hash used when no real hash exists,
# prevents timing attacks that could reveal valid emails.
_DUMMY_HASH = pwd_context.hash("not-a-real-password")


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with bcrypt via passlib.
    bcrypt automatically generates a unique salt — same password gives
    a different hash each time, which is correct and expected.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Timing-safe bcrypt comparison via passlib.

    Guards against:
      - None hash  (student accounts never have a password)
      - Truncated / malformed hash  (both produce a ValueError in passlib)
      - Timing attacks  (always runs a bcrypt verify, even on dummy hash)
    """
    if not hashed or len(hashed) < 59:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Malformed hash slipped through length check — still safe
        pwd_context.verify(plain, _DUMMY_HASH)
        return False


# bcrypt is CPU-bound; these run in a worker thread.
async def hash_password_async(plain: str) -> str:
    return await anyio.to_thread.run_sync(hash_password, plain)


async def verify_password_async(plain: str, hashed: str | None) -> bool:
    return await anyio.to_thread.run_sync(verify_password, plain, hashed)


# ── Session Tokens ────────────────────────────────────────────────────
def generate_session_token() -> str:
    """Opaque bearer token: 32 random bytes (256 bits), URL/cookie safe."""
    return secrets.token_urlsafe(32)


def generate_challenge_id() -> str:
    return secrets.token_urlsafe(16)
