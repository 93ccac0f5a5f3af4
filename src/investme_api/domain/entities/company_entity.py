from investme_api.infrastructure.database import Base
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, Numeric, String, Text, DateTime, ForeignKey, JSON, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional
from investme_api.domain.entities.enums import CompanyStatus, GuaranteeType


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    razao_social: Mapped[str] = mapped_column(String(255), nullable=False)
    nome_fantasia: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cnpj: Mapped[str] = mapped_column(String(14), unique=True, index=True, nullable=False)
    cep: Mapped[str] = mapped_column(String(8), nullable=False)
    rua: Mapped[str] = mapped_column(String(255), nullable=False)
    numero: Mapped[str] = mapped_column(String(20), nullable=False)
    complemento: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bairro: Mapped[str] = mapped_column(String(255), nullable=False)
    cidade: Mapped[str] = mapped_column(String(255), nullable=False)
    estado: Mapped[str] = mapped_column(String(2), nullable=False)
    telefone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email_contato: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cnae_principal: Mapped[str] = mapped_column(String(20), nullable=False)
    cnae_secundarios: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    inscricao_estadual: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inscricao_municipal: Mapped[str | None] = mapped_column(String(50), nullable=True)
    data_fundacao: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    faturamento: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    ebitda: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    divida_liquida: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    numero_funcionarios: Mapped[int | None] = mapped_column(Integer, nullable=True)
    descricao_negocio: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[CompanyStatus] = mapped_column(
        SAEnum(CompanyStatus, name="companystatus"), nullable=False, default=CompanyStatus.pendente_analise
    )
    observacoes_internas: Mapped[str | None] = mapped_column(Text, nullable=True)
    motivo_reprovacao: Mapped[str | None] = mapped_column(Text, nullable=True)
    analisado_por: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    data_analise: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    shareholders: Mapped[List["CompanyShareholder"]] = relationship(
        "CompanyShareholder", back_populates="company", cascade="all, delete-orphan", lazy="selectin"
    )
    guarantees: Mapped[List["CompanyGuarantee"]] = relationship(
        "CompanyGuarantee", back_populates="company", cascade="all, delete-orphan", lazy="selectin"
    )


class CompanyShareholder(Base):
    __tablename__ = "company_shareholders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    nome_completo: Mapped[str] = mapped_column(String(255), nullable=False)
    cpf: Mapped[str] = mapped_column(String(11), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="shareholders")


class CompanyGuarantee(Base):
    __tablename__ = "company_guarantees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    tipo: Mapped[GuaranteeType] = mapped_column(SAEnum(GuaranteeType, name="guaranteetype"), nullable=False)
    matricula: Mapped[str | None] = mapped_column(String(100), nullable=True)
    renavam: Mapped[str | None] = mapped_column(String(100), nullable=True)
    descricao: Mapped[str | None] = mapped_column(Text, nullable=True)
    valor_estimado: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    company: Mapped[Optional["Company"]] = relationship("Company", back_populates="guarantees")
