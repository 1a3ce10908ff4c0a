"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
모든 쿼리는 타임아웃 안에서 실행되며, 저장소 장애는 StorageUnavailable로 변환.

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, TypeVar

import aiosqlite

from core.constants import Defaults, Paths, SEED_ASSETS
from core.errors import StorageUnavailable
from core.types import TradingMode
from core.utils.ids import new_id
from core.utils.timezone import now_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")

MEMORY_DB = ":memory:"


def get_db_path(mode: TradingMode | str) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 운영 모드 (PRODUCTION/TESTNET)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(mode, str):
        mode = TradingMode(mode.lower())

    if mode == TradingMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.TEST_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로 (":memory:" 허용)
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    if db_path_str == MEMORY_DB:
        conn = await aiosqlite.connect(MEMORY_DB)
    else:
        # 디렉토리가 없으면 생성
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        if readonly:
            conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
        else:
            conn = await aiosqlite.connect(db_path_str)

        # WAL 모드 설정
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    하나의 연결을 여러 코루틴이 공유하므로 트랜잭션은 태스크 단위로 직렬화됨.
    같은 태스크 안에서 중첩된 transaction()은 바깥 트랜잭션에 합류.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부
        timeout_sec: 쿼리 1건당 최대 대기 시간

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction() as conn:
        await conn.execute("INSERT INTO ...")

    await adapter.close()
    ```
    """

    def __init__(
        self,
        db_path: Path | str,
        readonly: bool = False,
        timeout_sec: float = Defaults.STORAGE_TIMEOUT_SEC,
    ):
        self.db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self.readonly = readonly
        self.timeout_sec = timeout_sec
        self._conn: aiosqlite.Connection | None = None
        self._tx_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """현재 태스크가 트랜잭션을 보유 중인지 여부"""
        return self._tx_owner is not None and self._tx_owner is asyncio.current_task()

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await self._guarded(
            create_connection(self.db_path, self.readonly)
        )

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def _guarded(self, awaitable: Awaitable[T]) -> T:
        """타임아웃 및 저장소 오류 변환

        asyncio.TimeoutError, aiosqlite.OperationalError → StorageUnavailable
        """
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_sec)
        except asyncio.TimeoutError as e:
            logger.warning(
                "저장소 타임아웃",
                extra={"db_path": str(self.db_path), "timeout_sec": self.timeout_sec},
            )
            raise StorageUnavailable(
                f"Storage timeout after {self.timeout_sec}s"
            ) from e
        except aiosqlite.OperationalError as e:
            logger.warning(f"저장소 오류: {e}")
            raise StorageUnavailable(str(e)) from e

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        if parameters:
            return await self._guarded(conn.execute(sql, parameters))
        return await self._guarded(conn.execute(sql))

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        conn = self._require_conn()

        return await self._guarded(conn.executemany(sql, parameters))

    @asynccontextmanager
    async def _read_scope(self) -> AsyncIterator[None]:
        """트랜잭션 밖 읽기는 진행 중인 트랜잭션이 끝날 때까지 대기

        연결을 공유하므로 대기 없이 읽으면 다른 태스크의 미커밋 행이 보임.
        """
        if self.in_transaction:
            yield
            return

        async with self._tx_lock:
            yield

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        async with self._read_scope():
            cursor = await self.execute(sql, parameters)
            return await self._guarded(cursor.fetchone())

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        async with self._read_scope():
            cursor = await self.execute(sql, parameters)
            return list(await self._guarded(cursor.fetchall()))

    async def fetchone_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> dict[str, Any] | None:
        """단일 행 조회 (컬럼명 → 값 dict)"""
        async with self._read_scope():
            cursor = await self.execute(sql, parameters)
            row = await self._guarded(cursor.fetchone())
        if row is None:
            return None
        columns = [desc[0] for desc in cursor.description]
        return dict(zip(columns, row))

    async def fetchall_dict(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[dict[str, Any]]:
        """전체 행 조회 (컬럼명 → 값 dict 목록)"""
        async with self._read_scope():
            cursor = await self.execute(sql, parameters)
            rows = await self._guarded(cursor.fetchall())
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in rows]

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._guarded(self._conn.commit())

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외(취소 포함) 시 자동 롤백.
        같은 태스크에서 중첩 호출하면 바깥 트랜잭션에 합류하고
        커밋/롤백은 가장 바깥 블록이 담당.

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        conn = self._require_conn()

        if self.in_transaction:
            yield conn
            return

        async with self._tx_lock:
            self._tx_owner = asyncio.current_task()
            try:
                yield conn
                await self._guarded(conn.commit())
            except BaseException:
                # CancelledError 포함: 부분 적용 금지
                await conn.rollback()
                raise
            finally:
                self._tx_owner = None

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter, seed: bool = True) -> None:
    """스키마 초기화 (테이블 생성)

    금액은 모두 Decimal 문자열(TEXT)로 저장.

    Args:
        adapter: 연결된 SQLiteAdapter
        seed: 기본 자산 등록 여부
    """
    # assets (거래 가능 자산)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS assets (
            asset_id         TEXT PRIMARY KEY,
            symbol           TEXT NOT NULL UNIQUE,
            name             TEXT NOT NULL,
            logo_url         TEXT,
            is_custom        INTEGER NOT NULL DEFAULT 0,
            price            TEXT NOT NULL DEFAULT '0',
            price_change_24h TEXT NOT NULL DEFAULT '0',
            market_cap       TEXT NOT NULL DEFAULT '0',
            volume_24h       TEXT NOT NULL DEFAULT '0',
            is_active        INTEGER NOT NULL DEFAULT 1,

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # balances (사용자별 자산 잔고)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS balances (
            user_id          TEXT NOT NULL,
            asset_id         TEXT NOT NULL,
            available        TEXT NOT NULL DEFAULT '0',
            locked           TEXT NOT NULL DEFAULT '0',

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),

            PRIMARY KEY (user_id, asset_id),
            FOREIGN KEY (asset_id) REFERENCES assets(asset_id)
        )
    """)

    # transactions (입출금 요청)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            transaction_id   TEXT PRIMARY KEY,
            user_id          TEXT NOT NULL,
            asset_id         TEXT NOT NULL,
            kind             TEXT NOT NULL CHECK (kind IN ('deposit', 'withdrawal')),
            amount           TEXT NOT NULL,
            status           TEXT NOT NULL DEFAULT 'pending'
                             CHECK (status IN ('pending', 'completed', 'rejected', 'cancelled')),
            wallet_address   TEXT,
            transaction_hash TEXT,
            approved_by      TEXT,
            approved_at      TEXT,

            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL,

            FOREIGN KEY (asset_id) REFERENCES assets(asset_id)
        )
    """)

    # orders (주문)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS orders (
            order_id         TEXT PRIMARY KEY,
            user_id          TEXT NOT NULL,
            base_asset_id    TEXT NOT NULL,
            quote_asset_id   TEXT NOT NULL,
            kind             TEXT NOT NULL CHECK (kind IN ('market', 'limit')),
            side             TEXT NOT NULL CHECK (side IN ('buy', 'sell')),
            amount           TEXT NOT NULL,
            limit_price      TEXT,
            locked_price     TEXT NOT NULL,
            locked_amount    TEXT NOT NULL,
            filled_amount    TEXT NOT NULL DEFAULT '0',
            released_amount  TEXT NOT NULL DEFAULT '0',
            is_cancelled     INTEGER NOT NULL DEFAULT 0,

            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL,

            FOREIGN KEY (base_asset_id) REFERENCES assets(asset_id),
            FOREIGN KEY (quote_asset_id) REFERENCES assets(asset_id)
        )
    """)

    # ledger_entries (잔고 변경 감사 기록, append-only)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS ledger_entries (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL UNIQUE,
            ts               TEXT NOT NULL,
            user_id          TEXT NOT NULL,
            asset_id         TEXT NOT NULL,
            entry_type       TEXT NOT NULL,
            amount           TEXT NOT NULL,
            available_after  TEXT NOT NULL,
            locked_after     TEXT NOT NULL,
            ref_kind         TEXT,
            ref_id           TEXT
        )
    """)

    # 감사 기록 보호: 수정/삭제 차단
    await adapter.execute("""
        CREATE TRIGGER IF NOT EXISTS tr_ledger_entries_no_update
        BEFORE UPDATE ON ledger_entries
        BEGIN
            SELECT RAISE(ABORT, 'ledger_entries is append-only');
        END
    """)

    await adapter.execute("""
        CREATE TRIGGER IF NOT EXISTS tr_ledger_entries_no_delete
        BEFORE DELETE ON ledger_entries
        BEGIN
            SELECT RAISE(ABORT, 'ledger_entries is append-only');
        END
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_status
        ON transactions(status, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_user
        ON transactions(user_id, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_orders_user
        ON orders(user_id, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_entries_balance
        ON ledger_entries(user_id, asset_id, seq)
    """)

    await adapter.commit()

    if seed:
        await seed_assets(adapter)

    logger.info("스키마 초기화 완료")


async def seed_assets(adapter: SQLiteAdapter) -> int:
    """기본 자산 등록 (이미 있는 심볼은 건너뜀)

    Returns:
        새로 등록된 자산 수
    """
    now = now_iso()
    inserted = 0

    async with adapter.transaction():
        for symbol, name, is_custom, price in SEED_ASSETS:
            cursor = await adapter.execute(
                """
                INSERT OR IGNORE INTO assets (
                    asset_id, symbol, name, is_custom, price, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (new_id("ast"), symbol, name, int(is_custom), price, now, now),
            )
            inserted += cursor.rowcount

    if inserted:
        logger.info(f"기본 자산 등록: {inserted}건")

    return inserted
