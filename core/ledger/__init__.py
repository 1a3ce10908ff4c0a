"""
잔고 원장 (Ledger)

사용자별 자산 잔고의 단일 변경 주체와 감사 기록.

사용 예시:
```python
from core.ledger import BalanceGuard, LedgerStore

guard = BalanceGuard()
ledger = LedgerStore(db, guard)

await ledger.credit("alice", usdt_id, "100")
await ledger.lock("alice", usdt_id, "40")
balance = await ledger.get_balance("alice", usdt_id)
# balance.available == 60, balance.locked == 40
```
"""

from core.ledger.guard import BalanceGuard
from core.ledger.store import LedgerStore
from core.ledger.types import ENTRY_EFFECTS, BalanceKey, LedgerEntryType, entry_delta

__all__ = [
    "BalanceGuard",
    "LedgerStore",
    "BalanceKey",
    "LedgerEntryType",
    "ENTRY_EFFECTS",
    "entry_delta",
]
