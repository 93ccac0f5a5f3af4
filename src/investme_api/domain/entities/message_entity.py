from investme_api.infrastructure.database import Base
from datetime import datetime
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from investme_api.domain.entities.enums import PartyType


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    conversation_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    assunto: Mapped[str | None] = mapped_column(String(255), nullable=True)
    remetente_tipo: Mapped[PartyType] = mapped_column(SAEnum(PartyType, name="partytype"), nullable=False)
    remetente_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    destinatario_tipo: Mapped[PartyType] = mapped_column(SAEnum(PartyType, name="partytype"), nullable=False)
    conteudo: Mapped[str] = mapped_column(Text, nullable=False)
    anexos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    lida: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    credit_request_id: Mapped[int] = mapped_column(ForeignKey("credit_requests.id"), nullable=False, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
