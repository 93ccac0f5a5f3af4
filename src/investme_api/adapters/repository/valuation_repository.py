from sqlalchemy.orm import Session
from sqlalchemy import select
from investme_api.domain.entities.valuation_entity import Valuation
from investme_api.domain.entities.enums import ValuationStatus


class ValuationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, valuation_id: int) -> Valuation | None:
        return self.db.get(Valuation, valuation_id)

    def list_by_company(self, company_id: int) -> list[Valuation]:
        query = (
            select(Valuation)
            .where(Valuation.company_id == company_id)
            .order_by(Valuation.created_at.desc(), Valuation.id.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def latest_completed(self, company_id: int) -> Valuation | None:
        query = (
            select(Valuation)
            .where(Valuation.company_id == company_id, Valuation.status == ValuationStatus.completed)
            .order_by(Valuation.updated_at.desc(), Valuation.id.desc())
        )
        return self.db.execute(query).scalars().first()

    def create(self, **data) -> Valuation:
        valuation = Valuation(**data)
        self.db.add(valuation)
        self.db.flush()
        return valuation

    def update_fields(self, valuation: Valuation, values: dict) -> Valuation:
        for attr, value in values.items():
            setattr(valuation, attr, value)
        self.db.flush()
        return valuation

    def delete(self, valuation: Valuation) -> None:
        self.db.delete(valuation)
        self.db.flush()
