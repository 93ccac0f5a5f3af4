from sqlalchemy.orm import Session
from sqlalchemy import select, update
from investme_api.domain.entities.message_entity import Message
from investme_api.domain.entities.enums import PartyType


class MessageRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, **data) -> Message:
        message = Message(**data)
        self.db.add(message)
        self.db.flush()
        return message

    def first_of_conversation(self, conversation_id: str) -> Message | None:
        query = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return self.db.execute(query).scalars().first()

    def list_conversation(self, conversation_id: str) -> list[Message]:
        query = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list(self.db.execute(query).scalars().all())

    def list_for_companies(self, company_ids: list[int]) -> list[Message]:
        if not company_ids:
            return []
        query = select(Message).where(Message.company_id.in_(company_ids))
        return list(self.db.execute(query.order_by(Message.created_at.asc(), Message.id.asc())).scalars().all())

    def list_for_credit_requests(self, credit_request_ids: list[int]) -> list[Message]:
        if not credit_request_ids:
            return []
        query = select(Message).where(Message.credit_request_id.in_(credit_request_ids))
        return list(self.db.execute(query.order_by(Message.created_at.asc(), Message.id.asc())).scalars().all())

    def list_all(self) -> list[Message]:
        query = select(Message).order_by(Message.created_at.asc(), Message.id.asc())
        return list(self.db.execute(query).scalars().all())

    def mark_read(self, conversation_id: str, recipient: PartyType) -> int:
        query = (
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.destinatario_tipo == recipient,
                Message.lida.is_(False),
            )
            .values(lida=True)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(query).rowcount
