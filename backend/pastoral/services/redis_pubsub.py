"""
Redis Pub/Sub relay for store changes.

When several API processes share one database, each one publishes the
collection name after a local write and refreshes its own live queries when
another process announces a change.
"""

import asyncio
import json
import logging
from typing import Optional
from uuid import uuid4

import redis
import redis.asyncio as aioredis
from redis.asyncio.client import PubSub

from pastoral.core.config import settings
from pastoral.services.realtime import SubscriptionHub

logger = logging.getLogger(__name__)

CHANNEL = "store-changes"


class RedisChangeRelay:
    def __init__(self, hub: SubscriptionHub, redis_url: Optional[str] = None):
        self.hub = hub
        self.redis_url = redis_url or settings.REDIS_URL
        # Lets a process ignore its own announcements
        self.instance_id = uuid4().hex
        self.redis: Optional[aioredis.Redis] = None
        self.publisher: Optional[redis.Redis] = None
        self.pubsub: Optional[PubSub] = None
        self._listener_task: Optional[asyncio.Task] = None

    async def connect(self):
        try:
            self.redis = aioredis.from_url(
                self.redis_url, encoding="utf-8", decode_responses=True
            )
            self.publisher = redis.Redis.from_url(self.redis_url, decode_responses=True)
            self.pubsub = self.redis.pubsub()
            await self.pubsub.subscribe(CHANNEL)
            logger.info(f"Redis relay connected and subscribed to '{CHANNEL}' channel")
            self._listener_task = asyncio.create_task(self._listen())
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis relay: {e}")
            raise

    async def disconnect(self):
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass

        if self.pubsub:
            await self.pubsub.unsubscribe(CHANNEL)
            await self.pubsub.aclose()

        if self.redis:
            await self.redis.aclose()

        if self.publisher:
            self.publisher.close()

        logger.info("Redis relay disconnected")

    async def _listen(self):
        logger.info("Starting Redis relay listener...")
        try:
            async for message in self.pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    data = json.loads(message["data"])
                except ValueError as e:
                    logger.error(f"Malformed store change message: {e}")
                    continue
                if data.get("origin") == self.instance_id:
                    continue
                collection = data.get("collection")
                # Snapshot queries are blocking; keep them off the event loop
                count = await asyncio.to_thread(self.hub.notify, collection)
                logger.debug(f"Relayed change on '{collection}' to {count} listeners")
        except asyncio.CancelledError:
            logger.info("Redis relay listener cancelled")
        except redis.RedisError as e:
            logger.error(f"Redis relay listener error: {e}", exc_info=True)

    def publish_change(self, collection: str) -> None:
        """Store change listener: announce a local write to the other processes."""
        if not self.publisher:
            logger.warning("Redis not connected, cannot publish store change")
            return
        try:
            self.publisher.publish(
                CHANNEL, json.dumps({"collection": collection, "origin": self.instance_id})
            )
        except redis.RedisError as e:
            logger.error(f"Error publishing to Redis: {e}")
