from investme_api.infrastructure.database import Base
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column


class AuditLog(Base):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    acao: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entidade_tipo: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entidade_id: Mapped[int] = mapped_column(Integer, nullable=False)
    valor_anterior: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    valor_novo: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    observacoes: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
