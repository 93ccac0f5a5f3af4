import logging
from sqlalchemy.orm import Session
from investme_api.adapters.repository.company_repository import CompanyRepository
from investme_api.adapters.repository.valuation_repository import ValuationRepository
from investme_api.adapters.repository.audit_repository import AuditRepository
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.application.utils.utils import utcnow
from investme_api.domain.entities.company_entity import Company
from investme_api.domain.entities.enums import CompanyStatus, RoleType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.exceptions import ConflictError, NotFoundError, PermissionDenied, ValidationError
from investme_api.domain.models.company_models import (
    CompanyCreate, CompanyUpdate, CompanyRead, CompanyAdminRead, CompanyAdminUpdate, NetworkCompanyRead,
)
from investme_api.domain.services.role_approval import is_role_fully_approved
from investme_api.domain.services.status_rules import check_transition, COMPANY_TRANSITIONS

logger = logging.getLogger(__name__)

# campos que identificam a empresa e não mudam depois de aprovada
LOCKED_WHEN_APPROVED = {"cnpj", "razao_social"}


class CompanyUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository(db)
        self.repo_valuation = ValuationRepository(db)
        self.repo_audit = AuditRepository(db)
        self.repo_user = UserRepository(db)

    def _valuation_of(self, company: Company) -> float | None:
        latest = self.repo_valuation.latest_completed(company.id)
        if latest is None:
            return None
        value = latest.equity_value if latest.equity_value is not None else latest.enterprise_value
        return float(value) if value is not None else None

    def to_read(self, company: Company, model=CompanyRead):
        read = model.model_validate(company)
        return read.model_copy(update={"valuation": self._valuation_of(company)})

    def _get(self, company_id: int) -> Company:
        company = self.repo.get(company_id)
        if company is None:
            raise NotFoundError("Empresa não encontrada")
        return company

    def _get_owned(self, company_id: int, owner_id: int) -> Company:
        company = self._get(company_id)
        if company.owner_id != owner_id:
            raise NotFoundError("Empresa não encontrada")
        return company

    # Dono
    def create(self, current: UserEntity, payload: CompanyCreate) -> CompanyRead:
        if self.repo.get_by_cnpj(payload.cnpj) is not None:
            raise ConflictError("CNPJ já cadastrado")
        data = payload.model_dump(exclude={"shareholders", "guarantees"})
        company = self.repo.create(
            owner_id=current.id,
            data=data,
            shareholders=[s.model_dump() for s in payload.shareholders],
            guarantees=[g.model_dump() for g in payload.guarantees],
        )
        self.db.commit()
        self.db.refresh(company)
        logger.info("Empresa %s cadastrada pelo usuário %s", company.id, current.id)
        return self.to_read(company)

    def list_own(self, owner_id: int) -> list[CompanyRead]:
        return [self.to_read(c) for c in self.repo.list_by_owner(owner_id)]

    def get_for(self, company_id: int, current: UserEntity) -> CompanyRead:
        company = self._get(company_id)
        if company.owner_id == current.id:
            return self.to_read(company)
        if current.role == RoleType.investor and company.status == CompanyStatus.aprovada:
            return self.to_read(company)
        raise NotFoundError("Empresa não encontrada")

    def update(self, company_id: int, current: UserEntity, payload: CompanyUpdate) -> CompanyRead:
        """Edição pelo dono.

        Empresas reprovadas não podem ser editadas; CNPJ e razão social ficam
        travados após a aprovação; editar uma empresa ``incompleto`` devolve-a
        para ``pendente_analise``.
        """
        company = self._get_owned(company_id, current.id)
        if company.status == CompanyStatus.reprovada:
            raise ConflictError("Empresa reprovada não pode ser editada")

        values = payload.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("Nenhum campo informado")
        if company.status == CompanyStatus.aprovada:
            locked = {k for k in LOCKED_WHEN_APPROVED & values.keys() if values[k] != getattr(company, k)}
            if locked:
                raise ConflictError("CNPJ e razão social não podem ser alterados após a aprovação")
        if "cnpj" in values and values["cnpj"] != company.cnpj:
            other = self.repo.get_by_cnpj(values["cnpj"])
            if other is not None:
                raise ConflictError("CNPJ já cadastrado")
        if company.status == CompanyStatus.incompleto:
            values["status"] = CompanyStatus.pendente_analise

        self.repo.update_fields(company, values)
        self.db.commit()
        self.db.refresh(company)
        return self.to_read(company)

    # Rede de investidores
    def list_network(self, current: UserEntity) -> list[NetworkCompanyRead]:
        user = self.repo_user.get_by_id(current.id)
        if not is_role_fully_approved(user, RoleType.investor):
            raise PermissionDenied("Cadastro de investidor ainda não aprovado")
        result = []
        for company in self.repo.find_all(CompanyStatus.aprovada):
            read = NetworkCompanyRead.model_validate(company)
            result.append(read.model_copy(update={"valuation": self._valuation_of(company)}))
        return result

    # Back-office
    def admin_list(self, status: CompanyStatus | None = None) -> list[CompanyAdminRead]:
        return [self.to_read(c, CompanyAdminRead) for c in self.repo.find_all(status)]

    def admin_get(self, company_id: int) -> CompanyAdminRead:
        return self.to_read(self._get(company_id), CompanyAdminRead)

    def admin_update(self, company_id: int, admin_id: int, payload: CompanyAdminUpdate) -> CompanyAdminRead:
        company = self._get(company_id)
        current = company.status
        previous = {"status": current.value, "observacoesInternas": company.observacoes_internas}

        if payload.status is not None:
            target = CompanyStatus(payload.status)
            check_transition(COMPANY_TRANSITIONS, current, target, payload.reason)
            values = {"status": target, "analisado_por": admin_id, "data_analise": utcnow()}
            if target == CompanyStatus.reprovada:
                values["motivo_reprovacao"] = payload.reason.strip()
            if payload.observacoes_internas is not None:
                values["observacoes_internas"] = payload.observacoes_internas
            if self.repo.transition(company_id, current, values) == 0:
                self.db.rollback()
                raise ConflictError("Empresa alterada por outra operação; recarregue e tente novamente")
            acao = f"empresa_{target.value}"
        elif payload.observacoes_internas is not None:
            self.repo.update_fields(company, {"observacoes_internas": payload.observacoes_internas})
            acao = "empresa_observacoes"
        else:
            raise ValidationError("Nenhum campo informado")

        self.db.refresh(company)
        self.repo_audit.record(
            acao=acao,
            entidade_tipo="company",
            entidade_id=company_id,
            admin_user_id=admin_id,
            valor_anterior=previous,
            valor_novo={"status": company.status.value, "observacoesInternas": company.observacoes_internas},
            observacoes=payload.reason,
        )
        self.db.commit()
        logger.info("Empresa %s atualizada por %s (%s)", company_id, admin_id, acao)
        return self.to_read(company, CompanyAdminRead)
