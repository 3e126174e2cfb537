"""
Storage for match validation results.
Results are upserted by id ('{event_key}_{match_key}') and indexed by event.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from shared.models.domain import MatchValidationResult
from shared.models.enums import ValidationStatus
from shared.utils.logging import get_logger
from shared.utils.redis_manager import RedisManager, event_index_key, result_key

from validation.engine import result_id
from validation.filters import sort_validation_results

logger = get_logger(__name__)


class ResultRepository(ABC):
    """Base for result stores. Queries return results in match order."""

    @abstractmethod
    async def put(self, result: MatchValidationResult) -> None:
        """Insert or replace the result stored under result.id."""
        pass

    @abstractmethod
    async def get(self, id: str) -> Optional[MatchValidationResult]:
        pass

    async def get_for_match(self, event_key: str, match_key: str) -> Optional[MatchValidationResult]:
        return await self.get(result_id(event_key, match_key))

    @abstractmethod
    async def query_by_event(self, event_key: str) -> list[MatchValidationResult]:
        pass

    async def query_by_status(
        self, event_key: str, status: ValidationStatus
    ) -> list[MatchValidationResult]:
        return [r for r in await self.query_by_event(event_key) if r.status == status]

    @abstractmethod
    async def delete_by_event(self, event_key: str) -> int:
        """Remove every result for the event. Returns the number removed."""
        pass


class InMemoryResultRepository(ResultRepository):
    """Dict-backed store for tests and single-process runs."""

    def __init__(self) -> None:
        self._results: dict[str, MatchValidationResult] = {}

    async def put(self, result: MatchValidationResult) -> None:
        self._results[result.id] = result

    async def get(self, id: str) -> Optional[MatchValidationResult]:
        return self._results.get(id)

    async def query_by_event(self, event_key: str) -> list[MatchValidationResult]:
        return sort_validation_results(
            r for r in self._results.values() if r.event_key == event_key
        )

    async def delete_by_event(self, event_key: str) -> int:
        ids = [id for id, r in self._results.items() if r.event_key == event_key]
        for id in ids:
            del self._results[id]
        return len(ids)

    def __len__(self) -> int:
        return len(self._results)


class RedisResultRepository(ResultRepository):
    """JSON values at validation:result:{id}; ids per event in validation:event:{event_key}."""

    def __init__(self, redis: RedisManager, ttl_s: Optional[int] = None) -> None:
        self._redis = redis
        self._ttl_s = ttl_s

    async def put(self, result: MatchValidationResult) -> None:
        index = event_index_key(result.event_key)
        pipe = self._redis.client.pipeline(transaction=True)
        pipe.set(result_key(result.id), result.model_dump_json(), ex=self._ttl_s)
        pipe.sadd(index, result.id)
        if self._ttl_s:
            pipe.expire(index, self._ttl_s)
        await pipe.execute()
        logger.debug("validation_result_stored", id=result.id, status=result.status.value)

    async def get(self, id: str) -> Optional[MatchValidationResult]:
        raw = await self._redis.client.get(result_key(id))
        if raw is None:
            return None
        return MatchValidationResult.model_validate_json(raw)

    async def query_by_event(self, event_key: str) -> list[MatchValidationResult]:
        index = event_index_key(event_key)
        ids = sorted(await self._redis.client.smembers(index))
        if not ids:
            return []
        raws = await self._redis.client.mget([result_key(id) for id in ids])

        results: list[MatchValidationResult] = []
        expired: list[str] = []
        for id, raw in zip(ids, raws):
            if raw is None:
                expired.append(id)
                continue
            results.append(MatchValidationResult.model_validate_json(raw))
        if expired:
            await self._redis.client.srem(index, *expired)
            logger.debug("validation_index_pruned", event_key=event_key, removed=len(expired))
        return sort_validation_results(results)

    async def delete_by_event(self, event_key: str) -> int:
        index = event_index_key(event_key)
        ids = list(await self._redis.client.smembers(index))
        if not ids:
            await self._redis.client.delete(index)
            return 0
        pipe = self._redis.client.pipeline(transaction=True)
        pipe.delete(*[result_key(id) for id in ids])
        pipe.delete(index)
        results = await pipe.execute()
        removed = int(results[0])
        logger.info("validation_results_deleted", event_key=event_key, removed=removed)
        return removed
