"""
core/ledger/guard.py 테스트

같은 잔고 행은 직렬화, 다른 행은 병렬, 재진입 허용
"""

import asyncio

from core.ledger.guard import BalanceGuard


class TestBalanceGuard:
    """BalanceGuard 테스트"""

    async def test_same_key_serialized(self) -> None:
        guard = BalanceGuard()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with guard.hold(("alice", "usdt")):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        # 진입/이탈이 교차하지 않음
        assert events in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    async def test_different_keys_parallel(self) -> None:
        guard = BalanceGuard()
        inside = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with guard.hold(("alice", "usdt")):
                inside.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await inside.wait()

        # 다른 키는 대기 없이 획득
        async with guard.hold(("bob", "usdt")):
            assert guard.is_held(("bob", "usdt"))

        release.set()
        await task

    async def test_reentrant(self) -> None:
        guard = BalanceGuard()
        key = ("alice", "usdt")

        async with guard.hold(key):
            async with guard.hold(key, ("alice", "btc")):
                assert guard.is_held(key)
            # 안쪽 블록이 새로 획득한 키만 해제
            assert guard.is_held(key)
            assert not guard.is_held(("alice", "btc"))

        assert not guard.is_held(key)

    async def test_opposite_order_no_deadlock(self) -> None:
        """키 순서를 반대로 요청해도 교착 없음 (정렬 획득)"""
        guard = BalanceGuard()
        a = ("alice", "usdt")
        b = ("bob", "usdt")

        async def worker(first, second) -> None:
            for _ in range(20):
                async with guard.hold(first, second):
                    await asyncio.sleep(0)

        await asyncio.wait_for(
            asyncio.gather(worker(a, b), worker(b, a)),
            timeout=5,
        )

    async def test_released_on_exception(self) -> None:
        guard = BalanceGuard()
        key = ("alice", "usdt")

        try:
            async with guard.hold(key):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert not guard.is_held(key)
        async with asyncio.timeout(1):
            async with guard.hold(key):
                pass

    async def test_duplicate_keys(self) -> None:
        guard = BalanceGuard()
        key = ("alice", "usdt")

        async with guard.hold(key, key):
            assert guard.is_held(key)

    async def test_entries_removed_when_idle(self) -> None:
        """보유자도 대기자도 없는 키는 레지스트리에서 제거"""
        guard = BalanceGuard()

        async def worker(user_id: str) -> None:
            async with guard.hold((user_id, "usdt"), ("shared", "usdt")):
                await asyncio.sleep(0.001)

        await asyncio.gather(*(worker(f"user-{i}") for i in range(20)))

        assert guard.active_keys == 0

    async def test_entry_kept_while_waiting(self) -> None:
        guard = BalanceGuard()
        key = ("alice", "usdt")
        inside = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with guard.hold(key):
                inside.set()
                await release.wait()

        async def waiter() -> None:
            async with guard.hold(key):
                pass

        first = asyncio.create_task(holder())
        await inside.wait()
        second = asyncio.create_task(waiter())
        await asyncio.sleep(0)

        release.set()
        await asyncio.gather(first, second)

        assert guard.active_keys == 0

    async def test_cancelled_waiter_leaves_no_entry(self) -> None:
        guard = BalanceGuard()
        key = ("alice", "usdt")
        inside = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with guard.hold(key):
                inside.set()
                await release.wait()

        async def waiter() -> None:
            async with guard.hold(key):
                pass

        first = asyncio.create_task(holder())
        await inside.wait()
        waiting = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        waiting.cancel()
        try:
            await waiting
        except asyncio.CancelledError:
            pass

        release.set()
        await first

        assert guard.active_keys == 0
