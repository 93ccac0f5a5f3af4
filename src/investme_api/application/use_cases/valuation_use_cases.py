import logging
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session
from investme_api.adapters.repository.valuation_repository import ValuationRepository
from investme_api.adapters.repository.company_repository import CompanyRepository
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.application.utils.utils import utcnow
from investme_api.domain.entities.company_entity import Company
from investme_api.domain.entities.enums import CompanyStatus, RoleType, ValuationMethod, ValuationStatus
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.entities.valuation_entity import Valuation
from investme_api.domain.exceptions import ConflictError, NotFoundError, PermissionDenied
from investme_api.domain.models.valuation_models import ValuationCreate, DcfData, MultiplesData
from investme_api.domain.services.role_approval import is_role_fully_approved
from investme_api.domain.services.valuation_math import calculate_dcf, calculate_multiples

logger = logging.getLogger(__name__)


def _camel_keys(values: dict) -> dict:
    return {to_camel(key): value for key, value in values.items()}


class ValuationUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ValuationRepository(db)
        self.repo_company = CompanyRepository(db)
        self.repo_user = UserRepository(db)

    def _company(self, company_id: int) -> Company:
        company = self.repo_company.get(company_id)
        if company is None:
            raise NotFoundError("Empresa não encontrada")
        return company

    def _can_read(self, company: Company, current: UserEntity) -> bool:
        if current.role == RoleType.admin or company.owner_id == current.id:
            return True
        return current.role == RoleType.investor and company.status == CompanyStatus.aprovada

    def _check_can_write(self, company: Company, current: UserEntity) -> None:
        if company.owner_id == current.id:
            return
        if current.role == RoleType.investor and company.status == CompanyStatus.aprovada:
            user = self.repo_user.get_by_id(current.id)
            if is_role_fully_approved(user, RoleType.investor):
                return
            raise PermissionDenied("Cadastro de investidor ainda não aprovado")
        raise PermissionDenied("Sem permissão para avaliar esta empresa")

    def _own(self, valuation_id: int, current: UserEntity) -> Valuation:
        valuation = self.repo.get(valuation_id)
        if valuation is None:
            raise NotFoundError("Valuation não encontrado")
        if valuation.user_id != current.id:
            raise PermissionDenied("Apenas o autor pode alterar este valuation")
        return valuation

    def create(self, company_id: int, current: UserEntity, payload: ValuationCreate) -> Valuation:
        company = self._company(company_id)
        self._check_can_write(company, current)

        data = payload.dcf_data if payload.method == ValuationMethod.dcf else payload.multiples_data
        valuation = self.repo.create(
            company_id=company.id,
            user_id=current.id,
            user_type=current.role,
            method=payload.method,
            status=ValuationStatus.draft,
            inputs=data.model_dump(by_alias=True) if data is not None else None,
            notes=payload.notes,
            created_at=utcnow(),
        )
        if data is not None:
            self._apply(valuation, data)
        self.db.commit()
        self.db.refresh(valuation)
        return valuation

    def find_all(self, company_id: int, current: UserEntity) -> list[Valuation]:
        company = self._company(company_id)
        if not self._can_read(company, current):
            raise NotFoundError("Empresa não encontrada")
        return self.repo.list_by_company(company_id)

    def latest(self, company_id: int, current: UserEntity) -> Valuation | None:
        company = self._company(company_id)
        if not self._can_read(company, current):
            raise NotFoundError("Empresa não encontrada")
        return self.repo.latest_completed(company_id)

    def get(self, valuation_id: int, current: UserEntity) -> Valuation:
        valuation = self.repo.get(valuation_id)
        if valuation is None or not self._can_read(self._company(valuation.company_id), current):
            raise NotFoundError("Valuation não encontrado")
        return valuation

    def delete(self, valuation_id: int, current: UserEntity) -> None:
        self.repo.delete(self._own(valuation_id, current))
        self.db.commit()

    def calculate(self, valuation_id: int, current: UserEntity, data: DcfData | MultiplesData) -> Valuation:
        valuation = self._own(valuation_id, current)
        method = ValuationMethod.dcf if isinstance(data, DcfData) else ValuationMethod.multiples
        if valuation.method != method:
            raise ConflictError(f"Valuation usa o método '{valuation.method.value}'")
        self._apply(valuation, data)
        self.db.commit()
        self.db.refresh(valuation)
        logger.info("Valuation %s calculado (%s)", valuation.id, method.value)
        return valuation

    def _apply(self, valuation: Valuation, data: DcfData | MultiplesData) -> None:
        if isinstance(data, DcfData):
            results = calculate_dcf(data.model_dump())
            enterprise_value, equity_value = results["enterprise_value"], results["equity_value"]
        else:
            results = calculate_multiples(data.model_dump())
            enterprise_value = equity_value = results["adjusted_valuation"]
        self.repo.update_fields(valuation, {
            "inputs": data.model_dump(by_alias=True),
            "results": _camel_keys(results),
            "enterprise_value": round(enterprise_value, 2),
            "equity_value": round(equity_value, 2),
            "status": ValuationStatus.completed,
        })
