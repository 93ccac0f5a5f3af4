from investme_api.infrastructure.database import Base
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, Numeric, String, Text, DateTime, ForeignKey, JSON, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from investme_api.domain.entities.enums import CreditRequestStatus
from investme_api.domain.entities.company_entity import Company


class CreditRequest(Base):
    __tablename__ = "credit_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    valor_solicitado: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    prazo_meses: Mapped[int] = mapped_column(Integer, nullable=False)
    finalidade: Mapped[str] = mapped_column(Text, nullable=False)
    documentos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[CreditRequestStatus] = mapped_column(
        SAEnum(CreditRequestStatus, name="creditrequeststatus"), nullable=False, default=CreditRequestStatus.pendente
    )
    investor_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    data_aceite: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    observacoes_analise: Mapped[str | None] = mapped_column(Text, nullable=True)
    analisado_por: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    data_analise: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    company: Mapped["Company"] = relationship("Company", lazy="joined")
