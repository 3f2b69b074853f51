"""제출/결과 구간 변경을 알리는 인프로세스 스냅샷 허브입니다.

토픽(`submissions:{survey_id}`, `outcomes:{survey_id}`)별 버전 카운터를 두고,
쓰기가 일어나면 publish() 로 버전을 올려 대기 중인 구독자를 깨웁니다.
구독자는 마지막으로 본 버전을 넘겨 `await wait()` 하고, 새 버전을 받으면 스냅샷을 다시 읽습니다.

publish() 는 동기 엔드포인트(워커 스레드)에서 호출되므로 버전은 threading.Lock 으로 보호하고,
대기자는 자기 이벤트 루프의 asyncio.Event 로 깨웁니다. 대기 중에는 워커 스레드를 점유하지 않습니다.
"""

import asyncio
import logging
import threading
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)


def submissions_topic(survey_id: int) -> str:
    return f"submissions:{int(survey_id)}"


def outcomes_topic(survey_id: int) -> str:
    return f"outcomes:{int(survey_id)}"


class Subscription:
    def __init__(self, hub: "SnapshotHub", topic: str):
        self.hub = hub
        self.topic = topic
        self.closed = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._event: Optional[asyncio.Event] = None

    async def wait(self, since: int, timeout: Optional[float] = None) -> int:
        """버전이 since 와 달라지거나 timeout/close 될 때까지 대기하고 현재 버전을 반환한다.

        서버 재시작으로 버전이 since 보다 작아진 경우도 변경으로 보고 바로 반환한다.
        """
        return await self.hub._wait(self, since, timeout)

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.hub._release(self)

    def _wake(self):
        loop, event = self._loop, self._event
        if loop is None or event is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(event.set)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class SnapshotHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._versions: dict[str, int] = {}
        self._subscribers: dict[str, int] = {}
        self._waiters: dict[str, set[Subscription]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def version(self, topic: str) -> int:
        with self._lock:
            return self._versions.get(topic, 0)

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return self._subscribers.get(topic, 0)

    def waiter_count(self, topic: str) -> int:
        with self._lock:
            return len(self._waiters.get(topic, ()))

    def publish(self, topic: str) -> int:
        with self._lock:
            version = self._versions.get(topic, 0) + 1
            self._versions[topic] = version
            waiters = list(self._waiters.get(topic, ()))
        for subscription in waiters:
            subscription._wake()
        logger.debug("[hub] publish topic=%s version=%s waiters=%s", topic, version, len(waiters))
        return version

    def subscribe(self, topic: str) -> Subscription:
        with self._lock:
            if self._closed:
                raise RuntimeError("snapshot hub is closed")
            self._subscribers[topic] = self._subscribers.get(topic, 0) + 1
        return Subscription(self, topic)

    def close(self):
        with self._lock:
            self._closed = True
            waiters = [row for rows in self._waiters.values() for row in rows]
        for subscription in waiters:
            subscription._wake()
        logger.info("[hub] closed")

    def _ready(self, subscription: Subscription, since: int) -> bool:
        return self._closed or subscription.closed or self._versions.get(subscription.topic, 0) != int(since)

    async def _wait(self, subscription: Subscription, since: int, timeout: Optional[float]) -> int:
        topic = subscription.topic
        with self._lock:
            if self._ready(subscription, since):
                return self._versions.get(topic, 0)
            subscription._loop = asyncio.get_running_loop()
            subscription._event = asyncio.Event()
            self._waiters.setdefault(topic, set()).add(subscription)
        try:
            await asyncio.wait_for(subscription._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass
        finally:
            with self._lock:
                rows = self._waiters.get(topic)
                if rows is not None:
                    rows.discard(subscription)
                    if not rows:
                        self._waiters.pop(topic, None)
                subscription._loop = None
                subscription._event = None
        with self._lock:
            return self._versions.get(topic, 0)

    def _release(self, subscription: Subscription):
        with self._lock:
            remaining = self._subscribers.get(subscription.topic, 0) - 1
            if remaining > 0:
                self._subscribers[subscription.topic] = remaining
            else:
                self._subscribers.pop(subscription.topic, None)
        subscription._wake()


def get_hub(request: Request) -> SnapshotHub:
    return request.app.state.hub
