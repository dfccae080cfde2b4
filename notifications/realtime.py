"""
Real-time push backends.

The dispatcher hands every in-app notification to a PushBackend. Delivery to
connected browsers (websocket rooms and so on) happens in a separate
gateway that listens on the published channels; this module only publishes.

Backends:
- RedisPushBackend: publishes JSON on `<prefix>:user:<id>` Redis channels
- InMemoryPushBackend: records pushes in a list (tests, local development)
- NullPushBackend: drops every push
"""

import json
import logging
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class PushError(Exception):
    """A push could not be handed to the transport."""


class PushBackend:
    """Interface for real-time push transports."""

    def push_to_user(self, user_id, event: str, payload: Dict[str, Any]) -> None:
        """
        Publish an event to a single user's channel.

        Raises:
            PushError: If the transport rejected the message
        """
        raise NotImplementedError


class RedisPushBackend(PushBackend):
    """
    Publish push events on Redis pub/sub.

    Without an explicit url the `default` django-redis connection is reused.
    """

    def __init__(self, url: Optional[str] = None, channel_prefix: str = 'civic', client=None):
        self.url = url
        self.channel_prefix = channel_prefix
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self):
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if self.url:
                        import redis
                        self._client = redis.Redis.from_url(self.url)
                    else:
                        from django_redis import get_redis_connection
                        self._client = get_redis_connection('default')
        return self._client

    def channel_for(self, user_id) -> str:
        return f'{self.channel_prefix}:user:{user_id}'

    def push_to_user(self, user_id, event, payload):
        import redis

        message = json.dumps({'event': event, 'data': payload}, default=str)
        try:
            self.client.publish(self.channel_for(user_id), message)
        except redis.RedisError as exc:
            raise PushError(str(exc)) from exc


class InMemoryPushBackend(PushBackend):
    """
    Keep pushed messages in memory.

    `fail_with` makes every push raise, to exercise failure handling.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.pushes: List[Dict[str, Any]] = []
        self.fail_with = fail_with

    def push_to_user(self, user_id, event, payload):
        if self.fail_with is not None:
            raise self.fail_with
        self.pushes.append({'user_id': str(user_id), 'event': event, 'payload': payload})

    def pushes_for(self, user_id) -> List[Dict[str, Any]]:
        return [p for p in self.pushes if p['user_id'] == str(user_id)]

    def clear(self):
        self.pushes.clear()


class NullPushBackend(PushBackend):
    """Discard every push."""

    def push_to_user(self, user_id, event, payload):
        logger.debug(f"Dropped push {event} for user {user_id}")
