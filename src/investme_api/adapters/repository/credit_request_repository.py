from sqlalchemy.orm import Session
from sqlalchemy import select, update
from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.company_entity import Company
from investme_api.domain.entities.enums import CreditRequestStatus


class CreditRequestRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, request_id: int) -> CreditRequest | None:
        return self.db.get(CreditRequest, request_id)

    def _ordered(self, query):
        return query.order_by(CreditRequest.created_at.desc(), CreditRequest.id.desc())

    def list_by_owner(self, owner_id: int) -> list[CreditRequest]:
        query = select(CreditRequest).join(Company, Company.id == CreditRequest.company_id).where(Company.owner_id == owner_id)
        return list(self.db.execute(self._ordered(query)).scalars().all())

    def find_all(self, status: CreditRequestStatus | None = None) -> list[CreditRequest]:
        query = select(CreditRequest)
        if status is not None:
            query = query.where(CreditRequest.status == status)
        return list(self.db.execute(self._ordered(query)).scalars().all())

    def list_available(self) -> list[CreditRequest]:
        query = select(CreditRequest).where(
            CreditRequest.status == CreditRequestStatus.pendente,
            CreditRequest.investor_id.is_(None),
        )
        return list(self.db.execute(self._ordered(query)).scalars().all())

    def list_by_investor(self, investor_id: int) -> list[CreditRequest]:
        query = select(CreditRequest).where(CreditRequest.investor_id == investor_id)
        return list(self.db.execute(self._ordered(query)).scalars().all())

    def create(self, **data) -> CreditRequest:
        credit_request = CreditRequest(status=CreditRequestStatus.pendente, **data)
        self.db.add(credit_request)
        self.db.flush()
        return credit_request

    def transition(self, request_id: int, expected: CreditRequestStatus, values: dict, unclaimed: bool = False) -> int:
        query = update(CreditRequest).where(CreditRequest.id == request_id, CreditRequest.status == expected)
        if unclaimed:
            query = query.where(CreditRequest.investor_id.is_(None))
        query = query.values(**values).execution_options(synchronize_session="fetch")
        return self.db.execute(query).rowcount

    def update_fields(self, credit_request: CreditRequest, values: dict) -> CreditRequest:
        for attr, value in values.items():
            setattr(credit_request, attr, value)
        self.db.flush()
        return credit_request
