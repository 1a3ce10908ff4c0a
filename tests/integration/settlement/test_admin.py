"""AdminService 통합 테스트"""

from decimal import Decimal

import pytest

from core.errors import AlreadyFinalized, InvalidAmount, NotFound
from core.ledger.store import LedgerStore
from core.types import Decision, TransactionStatus
from settlement.admin import AdminService
from settlement.transaction_processor import TransactionProcessor


class TestSetPrice:
    """가격 직접 설정"""

    async def test_by_symbol(self, admin: AdminService) -> None:
        asset = await admin.set_price("btc", "45000.5")

        assert asset.symbol == "BTC"
        assert asset.price == Decimal("45000.5")

    async def test_by_id(self, admin: AdminService, btc: str) -> None:
        asset = await admin.set_price(btc, "1")

        assert asset.asset_id == btc
        assert asset.price == Decimal("1")

    async def test_zero_allowed(self, admin: AdminService) -> None:
        assert (await admin.set_price("MOON", "0")).price == 0

    @pytest.mark.parametrize("price", ["-1", "abc"])
    async def test_invalid(self, admin: AdminService, price: str) -> None:
        with pytest.raises(InvalidAmount):
            await admin.set_price("BTC", price)

    async def test_unknown_asset(self, admin: AdminService) -> None:
        with pytest.raises(NotFound):
            await admin.set_price("DOGE", "1")


class TestAdjustPrice:
    """퍼센트 가격 변동"""

    async def test_increase(self, admin: AdminService) -> None:
        asset = await admin.adjust_price("BTC", "10")

        assert asset.price == Decimal("47300")
        assert asset.price_change_24h == Decimal("10")

    async def test_decrease(self, admin: AdminService) -> None:
        asset = await admin.adjust_price("MOON", "-50")

        assert asset.price == Decimal("0.0005")
        assert asset.price_change_24h == Decimal("-50")

    async def test_to_zero(self, admin: AdminService) -> None:
        assert (await admin.adjust_price("ETH", "-100")).price == 0

    async def test_negative_result(self, admin: AdminService) -> None:
        with pytest.raises(InvalidAmount):
            await admin.adjust_price("ETH", "-150")

        # 변경 없음
        assert (await admin.assets.resolve("ETH")).price == Decimal("2300")


class TestSetActive:
    """거래 가능 여부"""

    async def test_disable_and_enable(self, admin: AdminService) -> None:
        assert (await admin.set_active("XRP", False)).is_active is False
        assert (await admin.set_active("XRP", True)).is_active is True


class TestSetLogo:
    """로고 URL"""

    async def test_set_and_clear(self, admin: AdminService) -> None:
        updated = await admin.set_logo("MOON", "https://cdn.example.com/moon.png")

        assert updated.logo_url == "https://cdn.example.com/moon.png"
        assert updated.to_dict()["logo_url"] == "https://cdn.example.com/moon.png"
        assert (await admin.set_logo("MOON", None)).logo_url is None

    async def test_seeded_without_logo(self, admin: AdminService, assets) -> None:
        assert all(asset.logo_url is None for asset in assets.values())

    async def test_unknown_asset(self, admin: AdminService) -> None:
        with pytest.raises(NotFound):
            await admin.set_logo("NOPE", "https://cdn.example.com/nope.png")


class TestDecide:
    """입출금 승인/거부 위임"""

    async def test_approve_with_attribution(
        self,
        admin: AdminService,
        processor: TransactionProcessor,
        ledger: LedgerStore,
        usdt: str,
    ) -> None:
        transaction = await processor.request_deposit("alice", usdt, "25")

        decided = await admin.decide("admin-7", transaction.transaction_id, Decision.APPROVE)

        assert decided.status == TransactionStatus.COMPLETED
        assert decided.approved_by == "admin-7"
        assert decided.transaction_hash is None
        assert (await ledger.get_balance("alice", usdt)).available == Decimal("25")

    async def test_second_decision_rejected(
        self,
        admin: AdminService,
        processor: TransactionProcessor,
        usdt: str,
    ) -> None:
        transaction = await processor.request_deposit("alice", usdt, "25")
        await admin.decide("admin-7", transaction.transaction_id, "reject")

        with pytest.raises(AlreadyFinalized):
            await admin.decide("admin-7", transaction.transaction_id, "approve")
