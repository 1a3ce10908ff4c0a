"""PortfolioService 통합 테스트"""

from decimal import Decimal

from core.domain.models import Asset
from core.ledger.store import LedgerStore
from settlement.admin import AdminService
from settlement.portfolio import PortfolioService


class TestValuate:
    """포트폴리오 평가"""

    async def test_empty(self, portfolio: PortfolioService) -> None:
        result = await portfolio.valuate("alice")

        assert result.holdings == []
        assert result.total_value == 0
        assert result.to_dict()["total_value"] == "0"

    async def test_values_available_and_locked(
        self,
        portfolio: PortfolioService,
        ledger: LedgerStore,
        assets: dict[str, Asset],
        fund,
    ) -> None:
        usdt = assets["USDT"].asset_id
        btc = assets["BTC"].asset_id
        await fund("alice", usdt, "500")
        await fund("alice", btc, "0.5")
        await ledger.lock("alice", btc, "0.25")

        result = await portfolio.valuate("alice")

        by_symbol = {h.symbol: h for h in result.holdings}
        assert by_symbol["BTC"].value == Decimal("21500")
        assert by_symbol["BTC"].locked == Decimal("0.25")
        assert by_symbol["USDT"].value == Decimal("500")
        assert result.total_value == Decimal("22000")
        # 평가액 큰 순
        assert [h.symbol for h in result.holdings] == ["BTC", "USDT"]

    async def test_zero_balances_skipped(
        self,
        portfolio: PortfolioService,
        ledger: LedgerStore,
        usdt: str,
        btc: str,
        fund,
    ) -> None:
        await fund("alice", usdt, "10")
        await ledger.get_balance("alice", btc)

        result = await portfolio.valuate("alice")

        assert [h.symbol for h in result.holdings] == ["USDT"]

    async def test_follows_price_changes(
        self,
        portfolio: PortfolioService,
        admin: AdminService,
        assets: dict[str, Asset],
        fund,
    ) -> None:
        await fund("alice", assets["MOON"].asset_id, "1000000")

        before = await portfolio.valuate("alice")
        await admin.adjust_price("MOON", "100")
        after = await portfolio.valuate("alice")

        assert before.total_value == Decimal("1000")
        assert after.total_value == Decimal("2000")
