from investme_api.infrastructure.database import Base
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, Numeric, Text, DateTime, ForeignKey, JSON, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from investme_api.domain.entities.enums import RoleType, ValuationMethod, ValuationStatus


class Valuation(Base):
    __tablename__ = "valuations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    user_type: Mapped[RoleType] = mapped_column(SAEnum(RoleType, name="roletype"), nullable=False)
    method: Mapped[ValuationMethod] = mapped_column(SAEnum(ValuationMethod, name="valuationmethod"), nullable=False)
    status: Mapped[ValuationStatus] = mapped_column(
        SAEnum(ValuationStatus, name="valuationstatus"), nullable=False, default=ValuationStatus.draft
    )
    inputs: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    results: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    enterprise_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    equity_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
