"""
pytest 공통 fixture 정의

- 임시 디렉토리 / secrets.yaml
- 인메모리 DB (스키마 + 기본 자산 시드)
- 원장 / 입출금 / 주문 정산 / 관리자 서비스
"""

import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Awaitable, Callable

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import MEMORY_DB, SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.domain.models import Asset
from core.ledger import BalanceGuard, LedgerStore
from core.storage.asset_store import AssetStore
from settlement import AdminService, OrderSettlement, PortfolioService, TransactionProcessor


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_secrets_file(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성"""
    secrets_content = """# 테스트용 secrets.yaml
mode: testnet

web:
  secret_key: "test_jwt_secret_key_xyz"
  token_ttl_min: 30

storage:
  timeout_sec: 2
"""
    secrets_path = temp_dir / "secrets.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_production(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (production 모드, 선택 항목 생략)"""
    secrets_content = """mode: production

web:
  secret_key: "prod_jwt_secret_key_xyz"
"""
    secrets_path = temp_dir / "secrets_prod.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 secrets.yaml 파일 생성"""
    secrets_content = """mode: invalid_mode

web:
  secret_key: "jwt_secret"
"""
    secrets_path = temp_dir / "secrets_invalid.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글턴 초기화 (테스트 간 격리)"""
    Settings.reset()
    yield
    Settings.reset()


# =========================================================================
# DB / 서비스
# =========================================================================


@pytest_asyncio.fixture
async def db() -> SQLiteAdapter:
    """인메모리 DB (스키마 + 기본 자산)"""
    adapter = SQLiteAdapter(MEMORY_DB)
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def guard() -> BalanceGuard:
    return BalanceGuard()


@pytest.fixture
def ledger(db: SQLiteAdapter, guard: BalanceGuard) -> LedgerStore:
    return LedgerStore(db, guard)


@pytest.fixture
def processor(db: SQLiteAdapter, ledger: LedgerStore) -> TransactionProcessor:
    return TransactionProcessor(db, ledger)


@pytest.fixture
def settlement(db: SQLiteAdapter, ledger: LedgerStore) -> OrderSettlement:
    return OrderSettlement(db, ledger)


@pytest.fixture
def admin(db: SQLiteAdapter, processor: TransactionProcessor) -> AdminService:
    return AdminService(db, processor)


@pytest.fixture
def portfolio(db: SQLiteAdapter, ledger: LedgerStore) -> PortfolioService:
    return PortfolioService(db, ledger)


@pytest_asyncio.fixture
async def assets(db: SQLiteAdapter) -> dict[str, Asset]:
    """심볼 → 시드 자산"""
    return {a.symbol: a for a in await AssetStore(db).list_assets()}


@pytest.fixture
def usdt(assets: dict[str, Asset]) -> str:
    return assets["USDT"].asset_id


@pytest.fixture
def btc(assets: dict[str, Asset]) -> str:
    return assets["BTC"].asset_id


@pytest.fixture
def fund(ledger: LedgerStore) -> Callable[[str, str, str], Awaitable[None]]:
    """사용자 잔고 충전 헬퍼 (원장 credit 직접 호출)"""

    async def _fund(user_id: str, asset_id: str, amount: str) -> None:
        await ledger.credit(user_id, asset_id, Decimal(amount))

    return _fund
