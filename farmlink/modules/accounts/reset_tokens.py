"""Password-reset tokens kept in Redis with a TTL.

Each token is a random hex string keyed under ``password-reset:<token>``.
The stored record carries its own expiry timestamp so expiry is checked
against the injected clock, while the Redis TTL removes abandoned tokens
without a sweep job. Tokens are single-use: consuming one deletes it.
"""

from __future__ import annotations

import json
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import redis.asyncio as redis

from farmlink.clock import Clock, SystemClock
from farmlink.config import settings
from farmlink.exceptions import InvalidTokenException, TokenExpiredException
from farmlink.modules.accounts.constants import RESET_TOKEN_BYTES, RESET_TOKEN_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetTokenRecord:
    user_id: uuid.UUID
    expires_at: datetime


class ResetTokenStore:
    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        clock: Clock | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis = redis_client
        self.clock = clock or SystemClock()
        self.ttl_seconds = ttl_seconds or settings.reset_token_ttl_seconds

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(settings.redis_url, decode_responses=True)
        return self._redis

    def _make_key(self, token: str) -> str:
        return f"{RESET_TOKEN_PREFIX}:{token}"

    async def issue(self, user_id: uuid.UUID) -> str:
        """Create and store a new token for ``user_id``."""
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        expires_at = self.clock.now() + timedelta(seconds=self.ttl_seconds)
        client = await self._get_redis()
        await client.set(
            self._make_key(token),
            json.dumps({"user_id": str(user_id), "expires_at": expires_at.isoformat()}),
            ex=self.ttl_seconds,
        )
        logger.info("Issued password reset token for user %s", user_id)
        return token

    def _parse(self, raw: str | None) -> ResetTokenRecord:
        if raw is None:
            raise InvalidTokenException("Invalid or expired reset token")
        data = json.loads(raw)
        return ResetTokenRecord(
            user_id=uuid.UUID(data["user_id"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )

    async def peek(self, token: str) -> ResetTokenRecord:
        """Return the token's record without consuming it.

        Raises INVALID_TOKEN when unknown and TOKEN_EXPIRED (after deleting
        it) when past its expiry.
        """
        client = await self._get_redis()
        record = self._parse(await client.get(self._make_key(token)))
        if record.expires_at < self.clock.now():
            await client.delete(self._make_key(token))
            raise TokenExpiredException("Reset token has expired")
        return record

    async def consume(self, token: str) -> ResetTokenRecord:
        """Atomically fetch and delete the token (GETDEL).

        Only one caller can ever receive a given token's record; every
        other caller gets INVALID_TOKEN.
        """
        client = await self._get_redis()
        record = self._parse(await client.getdel(self._make_key(token)))
        if record.expires_at < self.clock.now():
            raise TokenExpiredException("Reset token has expired")
        return record
