# user_entity.py
from sqlalchemy import String, Enum as SAEnum, Boolean, DateTime, ForeignKey, UniqueConstraint, func, inspect
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import event
from investme_api.infrastructure.database import Base
from investme_api.domain.entities.enums import RoleType, RegistrationStatus, AdminProfile


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    cpf: Mapped[str | None] = mapped_column(String(11), unique=True, index=True, nullable=True)
    rg: Mapped[str | None] = mapped_column(String(20), nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    nome_completo: Mapped[str] = mapped_column(String(255), nullable=False)
    telefone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    cep: Mapped[str | None] = mapped_column(String(8), nullable=True)
    rua: Mapped[str | None] = mapped_column(String(255), nullable=True)
    numero: Mapped[str | None] = mapped_column(String(20), nullable=True)
    complemento: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bairro: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cidade: Mapped[str | None] = mapped_column(String(255), nullable=True)
    estado: Mapped[str | None] = mapped_column(String(2), nullable=True)
    limite_investimento: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    roles: Mapped[List["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        foreign_keys="UserRole.user_id",
    )

    def get_role(self, role: RoleType) -> Optional["UserRole"]:
        for held in self.roles:
            if held.role == role:
                return held
        return None

    @property
    def role_types(self) -> set[RoleType]:
        return {held.role for held in self.roles}


class UserRole(Base):
    """Sub-estado de aprovação de um perfil (empreendedor, investidor ou admin)."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[RoleType] = mapped_column(SAEnum(RoleType, name="roletype"), nullable=False)
    status: Mapped[RegistrationStatus] = mapped_column(
        SAEnum(RegistrationStatus, name="registrationstatus"),
        nullable=False,
        default=RegistrationStatus.pendente_analise,
    )
    cadastro_aprovado: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_confirmado: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    documentos_verificados: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    renda_comprovada: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    perfil_investidor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_perfil: Mapped[AdminProfile | None] = mapped_column(SAEnum(AdminProfile, name="adminprofile"), nullable=True)
    motivo_reprovacao: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    aprovado_por: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    aprovado_em: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user: Mapped["User"] = relationship("User", back_populates="roles", foreign_keys=[user_id])


@event.listens_for(User, "before_update")
def update_status_changed_at(mapper, connection, target: User):
    """Atualiza status_changed_at apenas se o is_active for alterado."""
    state = inspect(target)
    hist = state.attrs.is_active.history

    if hist.has_changes():  # só se o valor realmente mudou
        target.status_changed_at = datetime.now(timezone.utc)
