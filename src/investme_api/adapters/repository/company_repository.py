from sqlalchemy.orm import Session
from sqlalchemy import select, update, func
from investme_api.domain.entities.company_entity import Company, CompanyShareholder, CompanyGuarantee
from investme_api.domain.entities.enums import CompanyStatus


class CompanyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: int) -> Company | None:
        return self.db.get(Company, company_id)

    def get_by_cnpj(self, cnpj: str) -> Company | None:
        return self.db.execute(select(Company).where(Company.cnpj == cnpj)).scalar_one_or_none()

    def list_by_owner(self, owner_id: int) -> list[Company]:
        query = select(Company).where(Company.owner_id == owner_id).order_by(Company.created_at.desc(), Company.id.desc())
        return list(self.db.execute(query).scalars().all())

    def find_all(self, status: CompanyStatus | None = None) -> list[Company]:
        query = select(Company).order_by(Company.created_at.desc(), Company.id.desc())
        if status is not None:
            query = query.where(Company.status == status)
        return list(self.db.execute(query).scalars().all())

    def count(self, status: CompanyStatus | None = None) -> int:
        query = select(func.count(Company.id))
        if status is not None:
            query = query.where(Company.status == status)
        return self.db.execute(query).scalar_one()

    def create(self, *, owner_id: int, data: dict, shareholders: list[dict], guarantees: list[dict]) -> Company:
        company = Company(owner_id=owner_id, status=CompanyStatus.pendente_analise, **data)
        company.shareholders = [CompanyShareholder(**s) for s in shareholders]
        company.guarantees = [CompanyGuarantee(**g) for g in guarantees]
        self.db.add(company)
        self.db.flush()
        return company

    def update_fields(self, company: Company, values: dict) -> Company:
        for attr, value in values.items():
            setattr(company, attr, value)
        self.db.add(company)
        self.db.flush()
        return company

    def transition(self, company_id: int, expected: CompanyStatus, values: dict) -> int:
        query = (
            update(Company)
            .where(Company.id == company_id, Company.status == expected)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(query).rowcount
