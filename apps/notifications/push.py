import logging
import threading
from collections import defaultdict

import requests

logger = logging.getLogger(__name__)


class PushRegistry:
    """
    Registry of live client channels.

    A channel is any object with an ``emit(event_name, payload)`` method. Channels
    registered under a user id receive that user's events; channels registered
    with ``register_broadcast`` receive every event. Delivery is best-effort: a
    failing channel is logged and skipped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._channels = defaultdict(list)
        self._broadcast_channels = []

    def register(self, user_id, channel):
        with self._lock:
            if channel not in self._channels[str(user_id)]:
                self._channels[str(user_id)].append(channel)

    def unregister(self, user_id, channel):
        with self._lock:
            channels = self._channels.get(str(user_id), [])
            if channel in channels:
                channels.remove(channel)
            if not channels:
                self._channels.pop(str(user_id), None)

    def register_broadcast(self, channel):
        with self._lock:
            if channel not in self._broadcast_channels:
                self._broadcast_channels.append(channel)

    def unregister_broadcast(self, channel):
        with self._lock:
            if channel in self._broadcast_channels:
                self._broadcast_channels.remove(channel)

    def publish(self, user_id, event, payload):
        """Send an event to one user's channels and to the broadcast channels."""
        with self._lock:
            targets = list(self._channels.get(str(user_id), [])) + list(self._broadcast_channels)
        message = dict(payload, userId=user_id)
        return self._deliver(targets, event, message)

    def broadcast(self, event, payload):
        """Send an event to every registered channel."""
        with self._lock:
            targets = [channel for channels in self._channels.values() for channel in channels]
            targets += self._broadcast_channels
        return self._deliver(targets, event, payload)

    def _deliver(self, targets, event, payload):
        delivered = 0
        for channel in targets:
            try:
                channel.emit(event, payload)
                delivered += 1
            except Exception as e:
                logger.error(f"Push of '{event}' to {channel!r} failed: {str(e)}")
        return delivered


class RelayChannel:
    """Forwards events to the external socket gateway over HTTP."""

    def __init__(self, url, timeout=5.0, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def emit(self, event, payload):
        response = self.session.post(
            self.url,
            json={'event': event, 'payload': payload},
            timeout=self.timeout,
        )
        response.raise_for_status()

    def __repr__(self):
        return f"RelayChannel({self.url})"


def build_registry(relay_url='', relay_timeout=5.0):
    registry = PushRegistry()
    if relay_url:
        registry.register_broadcast(RelayChannel(relay_url, timeout=relay_timeout))
        logger.info(f"Push relay configured at {relay_url}")
    return registry
