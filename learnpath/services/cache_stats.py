# services/cache_stats.py
from typing import Dict, Any, Iterable
from redis.asyncio import Redis

from learnpath.services.cache_keys import anomalies_key, cache_hits_key, cache_misses_key, orphaned_records_key
from learnpath.services.unlock_types import AnomalyKind, LessonId, UserId

async def hit(r: Redis, namespace: str) -> None:
    await r.hincrby(cache_hits_key(), namespace, 1)

async def miss(r: Redis, namespace: str) -> None:
    await r.hincrby(cache_misses_key(), namespace, 1)

async def record_anomaly(r: Redis, kind: str, amount: int = 1) -> None:
    await r.hincrby(anomalies_key(), kind, amount)

async def record_orphans(r: Redis, user_id: UserId, lesson_ids: Iterable[LessonId]) -> int:
    """Count each (user, lesson) orphan once; returns how many were new."""
    members = [f"{user_id}:{lesson_id}" for lesson_id in sorted(lesson_ids)]
    if not members:
        return 0
    added = int(await r.sadd(orphaned_records_key(), *members))
    if added:
        await record_anomaly(r, AnomalyKind.ORPHANED_RECORD.value, added)
    return added

async def get_stats(r: Redis) -> Dict[str, Any]:
    hits = {k: int(v) for k, v in (await r.hgetall(cache_hits_key()) or {}).items()}
    misses = {k: int(v) for k, v in (await r.hgetall(cache_misses_key()) or {}).items()}
    anomalies = {k: int(v) for k, v in (await r.hgetall(anomalies_key()) or {}).items()}
    total_hits = sum(hits.values())
    total_misses = sum(misses.values())
    return {
        "hits": hits,
        "misses": misses,
        "hit_ratio": round(total_hits / max(1, total_hits + total_misses) * 100, 2),
        "anomalies": anomalies,
        "orphaned_records": int(await r.scard(orphaned_records_key()) or 0),
    }
