"""
Persistence of rows keyed by a freshly generated opaque token.

Token generation can collide with negligible probability; on a uniqueness
violation a new token is generated, up to MAX_TOKEN_ATTEMPTS times.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from src.api.utils.crypto import generate_opaque_token
from src.app.repositories.errors import DuplicateTokenError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_TOKEN_ATTEMPTS = 5


class TokenGenerationError(Exception):
    """Every attempt to persist a unique token collided"""


async def persist_with_unique_token(
    build: Callable[[str], T],
    create: Callable[[T], Awaitable[T]],
    byte_length: int = 32,
    attempts: int = MAX_TOKEN_ATTEMPTS,
) -> T:
    """
    Generate a token, build the row with it and persist it.

    Args:
        build: Builds the entity from a token value
        create: Repository create method; raises DuplicateTokenError on collision
        byte_length: Entropy of the generated token
        attempts: Maximum number of generation attempts

    Raises:
        TokenGenerationError: every attempt collided
    """
    for attempt in range(1, attempts + 1):
        entity = build(generate_opaque_token(byte_length))
        try:
            return await create(entity)
        except DuplicateTokenError:
            logger.warning(f"Token collision on attempt {attempt}/{attempts}, regenerating")
    raise TokenGenerationError(f"Could not generate a unique token after {attempts} attempts")
