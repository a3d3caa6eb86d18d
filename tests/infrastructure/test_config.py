"""Tests for environment-driven Settings."""

from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from fabricshop.domain.model.policy import PaidStockPolicy
from fabricshop.infrastructure.config import Settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # Keep a developer's .env out of these tests
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = Settings()
    assert settings.data_dir == Path("data")
    assert settings.tax_rate == Decimal("0.08")
    assert settings.paid_stock_policy is PaidStockPolicy.RELEASE
    assert settings.ledger_retry_attempts == 1

    pricing = settings.order_pricing()
    assert pricing.shipping_fee == Decimal("15.00")
    assert pricing.free_shipping_threshold == Decimal("500.00")
    assert pricing.estimated_delivery_days == 14


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("FABRICSHOP_TAX_RATE", "0.2")
    monkeypatch.setenv("FABRICSHOP_PAID_STOCK_POLICY", " Commit ")
    monkeypatch.setenv("FABRICSHOP_LOG_LEVEL", "debug")
    monkeypatch.setenv("FABRICSHOP_DATA_DIR", "/srv/shop")

    settings = Settings()

    assert settings.tax_rate == Decimal("0.2")
    assert settings.paid_stock_policy is PaidStockPolicy.COMMIT
    assert settings.log_level == "DEBUG"
    assert settings.data_dir == Path("/srv/shop")


def test_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("FABRICSHOP_SHIPPING_FEE=9.50\n")
    assert Settings().shipping_fee == Decimal("9.50")


@pytest.mark.parametrize(
    "name, value",
    [
        ("FABRICSHOP_TAX_RATE", "-0.1"),
        ("FABRICSHOP_PAID_STOCK_POLICY", "keep"),
        ("FABRICSHOP_LOG_LEVEL", "chatty"),
        ("FABRICSHOP_LEDGER_RETRY_ATTEMPTS", "-1"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings()
