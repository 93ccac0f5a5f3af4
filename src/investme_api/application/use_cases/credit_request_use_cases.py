import logging
from sqlalchemy.orm import Session
from investme_api.adapters.repository.credit_request_repository import CreditRequestRepository
from investme_api.adapters.repository.company_repository import CompanyRepository
from investme_api.adapters.repository.audit_repository import AuditRepository
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.application.utils.utils import utcnow
from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.enums import CompanyStatus, CreditRequestStatus, RoleType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.exceptions import ConflictError, NotFoundError, PermissionDenied, ValidationError
from investme_api.domain.models.credit_request_models import (
    CreditRequestCreate, CreditRequestRead, CreditRequestAdminUpdate,
)
from investme_api.domain.services.role_approval import is_role_fully_approved
from investme_api.domain.services.status_rules import check_transition, CREDIT_REQUEST_TRANSITIONS

logger = logging.getLogger(__name__)


def to_credit_request_read(credit_request: CreditRequest) -> CreditRequestRead:
    read = CreditRequestRead.model_validate(credit_request)
    company = credit_request.company
    return read.model_copy(update={"company_razao_social": company.razao_social if company else None})


class CreditRequestUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CreditRequestRepository(db)
        self.repo_company = CompanyRepository(db)
        self.repo_audit = AuditRepository(db)
        self.repo_user = UserRepository(db)

    def _require_fully_approved(self, current: UserEntity, role: RoleType, message: str) -> None:
        user = self.repo_user.get_by_id(current.id)
        if not is_role_fully_approved(user, role):
            raise PermissionDenied(message)

    def _get(self, request_id: int) -> CreditRequest:
        credit_request = self.repo.get(request_id)
        if credit_request is None:
            raise NotFoundError("Solicitação de crédito não encontrada")
        return credit_request

    def create(self, current: UserEntity, payload: CreditRequestCreate) -> CreditRequestRead:
        self._require_fully_approved(current, RoleType.entrepreneur, "Cadastro de empreendedor ainda não aprovado")

        company = self.repo_company.get(payload.company_id)
        if company is None or company.owner_id != current.id:
            raise NotFoundError("Empresa não encontrada")
        if company.status != CompanyStatus.aprovada:
            raise ConflictError("Apenas empresas aprovadas podem solicitar crédito")

        credit_request = self.repo.create(**payload.model_dump())
        self.db.commit()
        self.db.refresh(credit_request)
        logger.info("Solicitação de crédito %s criada para a empresa %s", credit_request.id, company.id)
        return to_credit_request_read(credit_request)

    def list_own(self, owner_id: int) -> list[CreditRequestRead]:
        return [to_credit_request_read(r) for r in self.repo.list_by_owner(owner_id)]

    # Investidor
    def list_for_investor(self, current: UserEntity, scope: str = "available") -> list[CreditRequestRead]:
        if scope == "mine":
            requests = self.repo.list_by_investor(current.id)
        elif scope == "available":
            self._require_fully_approved(current, RoleType.investor, "Cadastro de investidor ainda não aprovado")
            requests = self.repo.list_available()
        else:
            raise ValidationError("Filtro inválido; use 'available' ou 'mine'")
        return [to_credit_request_read(r) for r in requests]

    def accept(self, request_id: int, current: UserEntity) -> CreditRequestRead:
        """Investidor assume a análise de uma solicitação ainda disponível."""
        self._require_fully_approved(current, RoleType.investor, "Cadastro de investidor ainda não aprovado")
        credit_request = self._get(request_id)
        if credit_request.status != CreditRequestStatus.pendente or credit_request.investor_id is not None:
            raise ConflictError("Solicitação não está mais disponível")

        values = {"status": CreditRequestStatus.em_analise, "investor_id": current.id, "data_aceite": utcnow()}
        if self.repo.transition(request_id, CreditRequestStatus.pendente, values, unclaimed=True) == 0:
            self.db.rollback()
            raise ConflictError("Solicitação não está mais disponível")
        self.db.commit()
        self.db.refresh(credit_request)
        logger.info("Solicitação %s aceita pelo investidor %s", request_id, current.id)
        return to_credit_request_read(credit_request)

    # Back-office
    def admin_list(self, status: CreditRequestStatus | None = None) -> list[CreditRequestRead]:
        return [to_credit_request_read(r) for r in self.repo.find_all(status)]

    def admin_get(self, request_id: int) -> CreditRequestRead:
        return to_credit_request_read(self._get(request_id))

    def admin_update(self, request_id: int, admin_id: int, payload: CreditRequestAdminUpdate) -> CreditRequestRead:
        credit_request = self._get(request_id)
        current = credit_request.status
        previous = {"status": current.value, "observacoesAnalise": credit_request.observacoes_analise}

        if payload.status is not None:
            target = CreditRequestStatus(payload.status)
            check_transition(CREDIT_REQUEST_TRANSITIONS, current, target, payload.observacoes_analise)
            values = {"status": target, "analisado_por": admin_id, "data_analise": utcnow()}
            if payload.observacoes_analise is not None:
                values["observacoes_analise"] = payload.observacoes_analise.strip()
            if self.repo.transition(request_id, current, values) == 0:
                self.db.rollback()
                raise ConflictError("Solicitação alterada por outra operação; recarregue e tente novamente")
            acao = f"credito_{target.value}"
        elif payload.observacoes_analise is not None:
            self.repo.update_fields(credit_request, {"observacoes_analise": payload.observacoes_analise})
            acao = "credito_observacoes"
        else:
            raise ValidationError("Nenhum campo informado")

        self.db.refresh(credit_request)
        self.repo_audit.record(
            acao=acao,
            entidade_tipo="credit_request",
            entidade_id=request_id,
            admin_user_id=admin_id,
            valor_anterior=previous,
            valor_novo={"status": credit_request.status.value, "observacoesAnalise": credit_request.observacoes_analise},
        )
        self.db.commit()
        logger.info("Solicitação de crédito %s atualizada por %s (%s)", request_id, admin_id, acao)
        return to_credit_request_read(credit_request)
