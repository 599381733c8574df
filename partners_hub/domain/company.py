"""SQLAlchemy ORM models for partner companies and their pricing reference data.

Each company points at one class (price tier + catalog visibility) and at
most one support-fund level (the percent of each order it earns as credit).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partners_hub.db.base import Base
from partners_hub.domain.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class CompanyClass(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "classes"

    # "Americas" | "International" | regional variants such as "International - EU"
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class SupportFundLevel(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "support_fund_levels"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))


class Company(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "companies"

    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    netsuite_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    class_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True
    )
    support_fund_level_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("support_fund_levels.id", ondelete="SET NULL"), nullable=True
    )

    incoterm: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_term: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Contract
    contract_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contract_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    annual_target: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    # Ship-to
    ship_to_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ship_to_street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ship_to_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ship_to_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ship_to_zip: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    ship_to_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ship_to_contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ship_to_contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ship_to_contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    company_class: Mapped[Optional[CompanyClass]] = relationship(lazy="joined")
    support_fund_level: Mapped[Optional[SupportFundLevel]] = relationship(lazy="joined")

    @property
    def class_name(self) -> Optional[str]:
        return self.company_class.name if self.company_class else None

    @property
    def support_fund_percent(self) -> Decimal:
        if self.support_fund_level is None:
            return Decimal("0")
        return self.support_fund_level.percent
