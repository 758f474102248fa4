"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor is configurable (STORMTASK_BCRYPT_COST, default 12 —
roughly 100ms per hash on modern hardware), which makes both hashing and
checking CPU-bound. The async wrappers push that work to a thread so the
event loop keeps serving other requests meanwhile.
"""

import asyncio
import functools

import bcrypt

DEFAULT_ROUNDS = 12


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes.
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$", so hashing the same password twice
    gives two different strings.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a password against its bcrypt hash.

    A malformed stored hash counts as a mismatch, not an error.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@functools.lru_cache(maxsize=None)
def dummy_hash(rounds: int = DEFAULT_ROUNDS) -> str:
    """A throwaway hash at the given cost, made once per cost."""
    return hash_password("stormtask-dummy-password", rounds)


def verify_against_dummy(password: str, rounds: int = DEFAULT_ROUNDS) -> bool:
    """Spend the same bcrypt work as a real check when there is no stored hash.

    Learn: Without this, a login for an unknown email returns after a single
    SELECT while a wrong password costs a full bcrypt round, and response
    times reveal which emails are registered. Always returns False.
    """
    verify_password(password, dummy_hash(rounds))
    return False


async def hash_password_async(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)


async def verify_against_dummy_async(password: str, rounds: int = DEFAULT_ROUNDS) -> bool:
    return await asyncio.to_thread(verify_against_dummy, password, rounds)
