# File: src/stallpilot/models/financial_config.py
"""Versioned pricing and cost configuration."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stallpilot.core.db import Base
from stallpilot.utils.datetime import now_utc


class FinancialConfig(Base):
    """Price and cost figures valid from ``effective_from`` until superseded.

    The row in effect for a day is the one with the greatest
    ``effective_from <= day``; there is at most one row per day.
    """

    __tablename__ = "financial_configs"
    __table_args__ = (
        CheckConstraint("sell_price_per_liter >= 0", name="financial_config_price_non_negative"),
        CheckConstraint("cost_per_basket >= 0", name="financial_config_cost_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    effective_from: Mapped[date_type] = mapped_column(
        nullable=False,
        unique=True,
        index=True,
    )

    sell_price_per_liter: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    cost_per_basket: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    monthly_rent: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    monthly_electricity: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<FinancialConfig(effective_from={self.effective_from}, "
            f"price={self.sell_price_per_liter}, cost={self.cost_per_basket})>"
        )
