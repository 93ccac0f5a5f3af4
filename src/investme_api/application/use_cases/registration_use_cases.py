import logging
from sqlalchemy.orm import Session
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.adapters.repository.audit_repository import AuditRepository
from investme_api.application.utils.utils import utcnow
from investme_api.domain.entities.enums import RoleType, RegistrationStatus
from investme_api.domain.entities.user_entity import User, UserRole
from investme_api.domain.exceptions import NotFoundError, ValidationError, ConflictError
from investme_api.domain.models.user_models import RegistrationRead
from investme_api.domain.services.role_approval import (
    missing_requirements, editable_flags, WIRE_TO_FLAG,
)
from investme_api.domain.services.status_rules import check_transition, REGISTRATION_TRANSITIONS

logger = logging.getLogger(__name__)

ROLE_LABELS = {RoleType.entrepreneur: "Empreendedor", RoleType.investor: "Investidor"}


def to_registration_read(user: User, held: UserRole) -> RegistrationRead:
    missing = missing_requirements(user, held.role)
    return RegistrationRead(
        id=user.id,
        email=user.email,
        cpf=user.cpf,
        nome_completo=user.nome_completo,
        telefone=user.telefone,
        cidade=user.cidade,
        estado=user.estado,
        limite_investimento=user.limite_investimento,
        is_active=user.is_active,
        role=held.role,
        status=held.status,
        cadastro_aprovado=held.cadastro_aprovado,
        email_confirmado=held.email_confirmado,
        documentos_verificados=held.documentos_verificados,
        renda_comprovada=held.renda_comprovada,
        perfil_investidor=held.perfil_investidor,
        motivo_reprovacao=held.motivo_reprovacao,
        aprovado_por=held.aprovado_por,
        aprovado_em=held.aprovado_em,
        fully_approved=not missing,
        missing_requirements=sorted(missing),
    )


class RegistrationUseCases:
    """Aprovação de cadastros de empreendedores e investidores pelo back-office."""

    def __init__(self, db: Session):
        self.db = db
        self.repo_user = UserRepository(db)
        self.repo_audit = AuditRepository(db)

    def list_registrations(self, role: RoleType, status: RegistrationStatus | None = None) -> list[RegistrationRead]:
        return [to_registration_read(user, held) for user, held in self.repo_user.list_by_role(role, status)]

    def get_registration(self, user_id: int, role: RoleType) -> tuple[User, UserRole]:
        user = self.repo_user.get_by_id(user_id)
        held = user.get_role(role) if user else None
        if held is None:
            raise NotFoundError(f"{ROLE_LABELS.get(RoleType(role), 'Usuário')} não encontrado")
        return user, held

    def approve(self, user_id: int, role: RoleType, admin_id: int) -> RegistrationRead:
        return self._transition(user_id, role, admin_id, RegistrationStatus.aprovada)

    def reject(self, user_id: int, role: RoleType, admin_id: int, reason: str) -> RegistrationRead:
        return self._transition(user_id, role, admin_id, RegistrationStatus.reprovada, reason)

    def _transition(self, user_id: int, role: RoleType, admin_id: int, target: RegistrationStatus,
                    reason: str | None = None) -> RegistrationRead:
        user, held = self.get_registration(user_id, role)
        current = held.status
        check_transition(REGISTRATION_TRANSITIONS, current, target, reason)

        values = {"status": target, "aprovado_por": admin_id, "aprovado_em": utcnow()}
        if target == RegistrationStatus.reprovada:
            values["motivo_reprovacao"] = reason.strip()
        if self.repo_user.transition_role_status(held.id, current, values) == 0:
            self.db.rollback()
            raise ConflictError("Cadastro alterado por outra operação; recarregue e tente novamente")

        self.repo_audit.record(
            acao=f"{RoleType(role).value}_{'aprovado' if target == RegistrationStatus.aprovada else 'reprovado'}",
            entidade_tipo=RoleType(role).value,
            entidade_id=user_id,
            admin_user_id=admin_id,
            valor_anterior={"status": current.value},
            valor_novo={"status": target.value},
            observacoes=reason,
        )
        self.db.commit()
        self.db.refresh(held)
        logger.info("Cadastro %s do usuário %s: %s -> %s por %s", role, user_id, current.value, target.value, admin_id)
        return to_registration_read(user, held)

    def approve_field(self, user_id: int, role: RoleType, admin_id: int, field: str, approved: bool) -> RegistrationRead:
        """Alterna uma flag de aprovação; o status agregado não é alterado."""
        user, held = self.get_registration(user_id, role)
        if field not in editable_flags(role):
            raise ValidationError(f"Campo de aprovação '{field}' inválido")

        attr = WIRE_TO_FLAG[field]
        previous = getattr(held, attr)
        setattr(held, attr, bool(approved))
        self.repo_audit.record(
            acao="campo_aprovacao_alterado",
            entidade_tipo=RoleType(role).value,
            entidade_id=user_id,
            admin_user_id=admin_id,
            valor_anterior={field: previous},
            valor_novo={field: bool(approved)},
        )
        self.db.commit()
        self.db.refresh(held)
        return to_registration_read(user, held)
