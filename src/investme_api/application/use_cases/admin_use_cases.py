import logging
from sqlalchemy.orm import Session
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.adapters.repository.company_repository import CompanyRepository
from investme_api.adapters.repository.credit_request_repository import CreditRequestRepository
from investme_api.adapters.repository.pending_change_repository import PendingChangeRepository
from investme_api.adapters.repository.audit_repository import AuditRepository
from investme_api.application.use_cases.security import hash_password
from investme_api.application.utils.utils import utcnow, as_utc
from investme_api.domain.entities.enums import (
    RoleType, RegistrationStatus, CreditRequestStatus, ChangeStatus, AdminProfile,
)
from investme_api.domain.entities.user_entity import User
from investme_api.domain.exceptions import ConflictError, NotFoundError, ValidationError
from investme_api.domain.models.user_models import AdminUserCreate, AdminUserUpdate, AdminUserRead

logger = logging.getLogger(__name__)


def to_admin_read(user: User) -> AdminUserRead:
    held = user.get_role(RoleType.admin)
    return AdminUserRead(
        id=user.id,
        email=user.email,
        nome_completo=user.nome_completo,
        admin_perfil=held.admin_perfil if held else None,
        is_active=user.is_active,
        created_at=user.created_at,
    )


class AdminUseCases:
    """Usuários do back-office, estatísticas e trilha de auditoria."""

    def __init__(self, db: Session):
        self.db = db
        self.repo_user = UserRepository(db)
        self.repo_company = CompanyRepository(db)
        self.repo_credit = CreditRequestRepository(db)
        self.repo_change = PendingChangeRepository(db)
        self.repo_audit = AuditRepository(db)

    def list_admins(self) -> list[AdminUserRead]:
        return [to_admin_read(user) for user, _ in self.repo_user.list_by_role(RoleType.admin)]

    def create_admin(self, payload: AdminUserCreate, created_by: int | None = None) -> AdminUserRead:
        if self.repo_user.get_by_email(payload.email) is not None:
            # perfis de administrador não convivem com perfis de plataforma
            raise ConflictError("E-mail já cadastrado")
        user = self.repo_user.create(
            email=payload.email,
            hashed_password=hash_password(payload.senha),
            nome_completo=payload.nome_completo,
        )
        self.repo_user.add_role(
            user,
            RoleType.admin,
            status=RegistrationStatus.aprovada,
            cadastro_aprovado=True,
            email_confirmado=True,
            documentos_verificados=True,
            admin_perfil=AdminProfile(payload.admin_perfil),
            aprovado_por=created_by,
            aprovado_em=utcnow(),
        )
        if created_by is not None:
            self.repo_audit.record(
                acao="admin_criado",
                entidade_tipo="admin",
                entidade_id=user.id,
                admin_user_id=created_by,
                valor_novo={"email": user.email, "adminPerfil": AdminProfile(payload.admin_perfil).value},
            )
        self.db.commit()
        self.db.refresh(user)
        logger.info("Administrador %s criado", user.email)
        return to_admin_read(user)

    def update_admin(self, user_id: int, payload: AdminUserUpdate, updated_by: int) -> AdminUserRead:
        user = self.repo_user.get_by_id(user_id)
        held = user.get_role(RoleType.admin) if user else None
        if held is None:
            raise NotFoundError("Administrador não encontrado")
        values = payload.model_dump(exclude_unset=True)
        if values.get("is_active") is False and user_id == updated_by:
            raise ValidationError("Não é possível desativar o próprio usuário")

        previous = {"nomeCompleto": user.nome_completo, "isActive": user.is_active,
                    "adminPerfil": held.admin_perfil.value if held.admin_perfil else None}
        if values.get("nome_completo") is not None:
            user.nome_completo = values["nome_completo"]
        if values.get("is_active") is not None:
            user.is_active = values["is_active"]
        if values.get("admin_perfil") is not None:
            held.admin_perfil = AdminProfile(values["admin_perfil"])
        self.repo_audit.record(
            acao="admin_atualizado",
            entidade_tipo="admin",
            entidade_id=user_id,
            admin_user_id=updated_by,
            valor_anterior=previous,
            valor_novo={"nomeCompleto": user.nome_completo, "isActive": user.is_active,
                        "adminPerfil": held.admin_perfil.value if held.admin_perfil else None},
        )
        self.db.commit()
        self.db.refresh(user)
        return to_admin_read(user)

    def list_audit(self, entidade_tipo: str | None = None, entidade_id: int | None = None, limit: int = 200):
        return self.repo_audit.find_all(entidade_tipo=entidade_tipo, entidade_id=entidade_id, limit=limit)

    def stats(self) -> dict:
        now = utcnow()
        credit_requests = self.repo_credit.find_all()

        def this_month(request) -> bool:
            moment = as_utc(request.data_analise or request.created_at)
            return moment is not None and moment.year == now.year and moment.month == now.month

        approved_this_month = [
            r for r in credit_requests
            if r.status == CreditRequestStatus.aprovada and this_month(r)
        ]
        return {
            "totalCompanies": self.repo_company.count(),
            "pendingCompanies": self.repo_company.count(RegistrationStatus.pendente_analise),
            "pendingAnalysis": sum(1 for r in credit_requests if r.status == CreditRequestStatus.pendente),
            "monthlyApprovals": len(approved_this_month),
            "monthlyVolume": float(sum(r.valor_solicitado for r in approved_this_month)),
            "pendingEntrepreneurs": self.repo_user.count_by_role(RoleType.entrepreneur, RegistrationStatus.pendente_analise),
            "pendingInvestors": self.repo_user.count_by_role(RoleType.investor, RegistrationStatus.pendente_analise),
            "pendingProfileChanges": len(self.repo_change.find_all(status=ChangeStatus.pending)),
        }
