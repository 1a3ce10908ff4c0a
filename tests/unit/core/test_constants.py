"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 기본 자산 시드가 올바른지 확인
"""

from decimal import Decimal
from pathlib import Path

from core.constants import PROJECT_ROOT, SEED_ASSETS, Defaults, Paths


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_path(self) -> None:
        assert isinstance(PROJECT_ROOT, Path)
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        assert (PROJECT_ROOT / "core").exists()


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path_type(self) -> None:
        for name in ("CONFIG_DIR", "DATA_DIR", "LOGS_DIR", "SECRETS_FILE", "PROD_DB", "TEST_DB"):
            assert isinstance(getattr(Paths, name), Path), name

    def test_db_files_separated_by_mode(self) -> None:
        assert Paths.PROD_DB != Paths.TEST_DB
        assert Paths.PROD_DB.parent == Paths.DATA_DIR


class TestDefaults:
    """Defaults 테스트"""

    def test_positive_limits(self) -> None:
        assert Defaults.STORAGE_TIMEOUT_SEC > 0
        assert Defaults.TOKEN_TTL_MIN > 0

    def test_quote_asset_is_seeded(self) -> None:
        assert Defaults.QUOTE_ASSET in [symbol for symbol, *_ in SEED_ASSETS]


class TestSeedAssets:
    """SEED_ASSETS 테스트"""

    def test_symbols_unique(self) -> None:
        symbols = [symbol for symbol, *_ in SEED_ASSETS]
        assert len(symbols) == len(set(symbols))

    def test_prices_non_negative(self) -> None:
        for symbol, _, _, price in SEED_ASSETS:
            assert Decimal(price) >= 0, symbol

    def test_single_custom_token(self) -> None:
        custom = [symbol for symbol, _, is_custom, _ in SEED_ASSETS if is_custom]
        assert custom == ["MOON"]
