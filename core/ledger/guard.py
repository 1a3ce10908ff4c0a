"""
잔고 행 단위 상호 배제

(user_id, asset_id) → asyncio.Lock 매핑.
서로 다른 사용자/자산의 변경은 병렬로 진행되고, 같은 잔고 행의 변경만 직렬화.

여러 키는 항상 정렬 순서로 획득 (교착 방지).
같은 태스크가 이미 보유한 키는 다시 획득하지 않음 (재진입).
주의: 재진입 시 새 키를 추가로 획득하면 정렬 순서가 깨지므로,
복합 작업은 필요한 키 전체를 바깥에서 한 번에 hold() 해야 함.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from core.ledger.types import BalanceKey

logger = logging.getLogger(__name__)


class BalanceGuard:
    """잔고 행 잠금 레지스트리

    사용 예시:
    ```python
    guard = BalanceGuard()

    async with guard.hold(("alice", "ast-usdt"), ("bob", "ast-usdt")):
        ...  # 두 잔고 행을 배타적으로 사용
    ```
    """

    def __init__(self) -> None:
        self._locks: dict[BalanceKey, asyncio.Lock] = {}
        self._owners: dict[BalanceKey, asyncio.Task] = {}
        # 키별 보유 + 대기 태스크 수 (0이 되면 항목 제거)
        self._users: dict[BalanceKey, int] = {}

    @property
    def active_keys(self) -> int:
        """보유 또는 대기 중인 키 수"""
        return len(self._locks)

    def _checkout(self, key: BalanceKey) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        return lock

    def _checkin(self, key: BalanceKey) -> None:
        remaining = self._users[key] - 1
        if remaining:
            self._users[key] = remaining
            return
        del self._users[key]
        del self._locks[key]

    def is_held(self, key: BalanceKey) -> bool:
        """현재 태스크가 key를 보유 중인지 여부"""
        owner = self._owners.get(key)
        return owner is not None and owner is asyncio.current_task()

    @asynccontextmanager
    async def hold(self, *keys: BalanceKey) -> AsyncIterator[None]:
        """키 전체를 정렬 순서로 획득, 모든 종료 경로에서 해제

        Args:
            keys: (user_id, asset_id) 목록 (중복 허용)
        """
        task = asyncio.current_task()
        acquired: list[BalanceKey] = []

        try:
            for key in sorted(set(keys)):
                if self._owners.get(key) is task:
                    continue
                lock = self._checkout(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                self._owners[key] = task  # type: ignore[assignment]
                acquired.append(key)

            yield
        finally:
            for key in reversed(acquired):
                self._owners.pop(key, None)
                self._locks[key].release()
                self._checkin(key)
