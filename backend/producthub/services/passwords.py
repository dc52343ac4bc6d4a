"""
ProductHub Backend — Password Hashing
=======================================

bcrypt hashing for stored credentials. Hashing is CPU-bound, so the async
helpers push it onto Starlette's threadpool to keep the event loop free.
"""

import bcrypt
from starlette.concurrency import run_in_threadpool

from producthub.config import settings

# bcrypt only looks at the first 72 bytes; newer releases raise instead of
# truncating, so the cut is made explicitly.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 0) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def check_password_async(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(check_password, password, password_hash)
