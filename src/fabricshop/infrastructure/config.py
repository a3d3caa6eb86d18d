"""Application configuration.

Read once at process start from ``FABRICSHOP_*`` environment variables
(or a ``.env`` file) and handed to the composition root.  Nothing else in
the codebase reads the environment.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fabricshop.domain.model.policy import OrderPricing, PaidStockPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FABRICSHOP_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Path("data")

    # Pricing
    tax_rate: Decimal = Decimal("0.08")
    shipping_fee: Decimal = Decimal("15.00")
    free_shipping_threshold: Decimal | None = Decimal("500.00")
    estimated_delivery_days: int = 14

    # Reservations
    paid_stock_policy: PaidStockPolicy = PaidStockPolicy.RELEASE
    ledger_retry_attempts: int = 1

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @field_validator("paid_stock_policy", mode="before")
    @classmethod
    def parse_paid_stock_policy(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("tax_rate", "shipping_fee")
    @classmethod
    def non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("ledger_retry_attempts", "estimated_delivery_days")
    @classmethod
    def non_negative_int(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    def order_pricing(self) -> OrderPricing:
        return OrderPricing(
            tax_rate=self.tax_rate,
            shipping_fee=self.shipping_fee,
            free_shipping_threshold=self.free_shipping_threshold,
            estimated_delivery_days=self.estimated_delivery_days,
        )
