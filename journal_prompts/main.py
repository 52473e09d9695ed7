import asyncio
import json
import logging
import time
import uuid

import redis.asyncio as aioredis

from journal_prompts.blacklist import Blacklist
from journal_prompts.config import (
    DEAD_LETTER_QUEUE,
    MAX_RETRIES,
    QUEUE_NAME,
    REDIS_URL,
    WORKER_CONCURRENCY,
)
from journal_prompts.extract import MetadataExtractor
from journal_prompts.pipeline import run_extraction
from journal_prompts.stores.entries import EntryStore, KeyValueEntryStore
from journal_prompts.stores.redis import RedisStore

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s"
)
logger = logging.getLogger(__name__)


def backoff_seconds(attempt: int) -> int:
    """Delay before the next attempt: 2, 4, 8, ... capped at 60."""
    return min(2**attempt, 60)


async def enqueue_task(redis_client: aioredis.Redis, entry_id: str) -> str:
    """Queue a metadata merge for a saved entry.

    Returns:
        The new task id
    """
    task_id = str(uuid.uuid4())
    task = {"taskId": task_id, "entryId": entry_id, "attempt": 1}
    await redis_client.lpush(QUEUE_NAME, json.dumps(task))
    return task_id


async def process_task(task: dict, store: EntryStore, extractor: MetadataExtractor) -> None:
    """Extract metadata for one saved entry and merge it into the store.

    Args:
        task: Task dictionary from the Redis queue
        store: Entry store
        extractor: Metadata extractor
    """
    entry_id = task["entryId"]
    entry = await asyncio.to_thread(store.get_entry, entry_id)
    if entry is None:
        logger.warning(f"Entry {entry_id} no longer exists, skipping")
        return
    if entry.draft:
        logger.info(f"Entry {entry_id} is a draft, skipping extraction")
        return

    # A degraded result raises here and is retried, never cached
    metadata = await run_extraction(extractor, entry.content, strict=True)
    if not await asyncio.to_thread(store.update_metadata, entry_id, metadata):
        raise RuntimeError(f"Entry {entry_id} disappeared before metadata was merged")


async def _requeue_or_bury(redis_client: aioredis.Redis, task: dict) -> None:
    attempt = task.get("attempt", 1)
    payload = dict(task)
    if attempt >= MAX_RETRIES:
        await redis_client.lpush(DEAD_LETTER_QUEUE, json.dumps(payload))
        logger.error(f"Gave up on entry {task.get('entryId')} after {attempt} attempts")
        return

    payload["attempt"] = attempt + 1
    payload["retryAfter"] = time.time() + backoff_seconds(attempt)
    await redis_client.rpush(QUEUE_NAME, json.dumps(payload))
    logger.info(f"Retrying entry {task.get('entryId')} (attempt {attempt + 1}/{MAX_RETRIES})")


async def process_task_with_retry(
    redis_client: aioredis.Redis,
    task: dict,
    store: EntryStore,
    extractor: MetadataExtractor,
) -> None:
    """Run one queued merge, re-queueing or dead-lettering it on failure.

    Args:
        redis_client: Redis client owning the queues
        task: Task dictionary
        store: Entry store
        extractor: Metadata extractor
    """
    wait = task.get("retryAfter", 0) - time.time()
    if wait > 0:
        logger.debug(f"Waiting {wait:.1f}s before retrying entry {task.get('entryId')}")
        await asyncio.sleep(wait)

    started = time.monotonic()
    try:
        await process_task(task, store, extractor)
    except Exception as e:
        logger.error(f"Metadata merge failed for entry {task.get('entryId')}: {e}")
        await _requeue_or_bury(redis_client, task)
        return

    logger.info(
        json.dumps(
            {
                "event": "metadata_merged",
                "taskId": task.get("taskId"),
                "entryId": task.get("entryId"),
                "attempt": task.get("attempt", 1),
                "elapsed_ms": int((time.monotonic() - started) * 1000),
            }
        )
    )


async def worker_task(
    redis_client: aioredis.Redis, store: EntryStore, extractor: MetadataExtractor
) -> None:
    """Pop and process merge tasks forever."""
    while True:
        try:
            _, raw = await redis_client.brpop(QUEUE_NAME)
            await process_task_with_retry(redis_client, json.loads(raw), store, extractor)
        except Exception as e:
            logger.error(f"Worker iteration failed: {e}", exc_info=True)
            # Avoid a hot loop when Redis is down
            await asyncio.sleep(1)


async def worker_loop() -> None:
    """Run WORKER_CONCURRENCY consumers against the pending queue."""
    redis_client = aioredis.from_url(REDIS_URL)
    kv_store = RedisStore(REDIS_URL)
    store = KeyValueEntryStore(kv_store)
    extractor = MetadataExtractor(blacklist=Blacklist(kv_store))

    logger.info(
        f"Metadata worker consuming {QUEUE_NAME} "
        f"(concurrency={WORKER_CONCURRENCY}, dead letters to {DEAD_LETTER_QUEUE})"
    )

    consumers = [
        asyncio.create_task(worker_task(redis_client, store, extractor))
        for _ in range(WORKER_CONCURRENCY)
    ]
    try:
        await asyncio.gather(*consumers)
    finally:
        for consumer in consumers:
            consumer.cancel()
        await asyncio.gather(*consumers, return_exceptions=True)
        await redis_client.aclose()


def main():
    """Entry point for the metadata worker."""
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Metadata worker stopped")


if __name__ == "__main__":
    main()
