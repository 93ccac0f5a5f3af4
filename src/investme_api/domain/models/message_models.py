from datetime import datetime
from pydantic import Field
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import PartyType


class MessageCreate(CamelModel):
    conversation_id: str | None = None
    credit_request_id: int
    assunto: str | None = None
    conteudo: str = Field(min_length=1)
    anexos: list[str] = []
    destinatario_tipo: PartyType | None = None


class MessageRead(CamelModel):
    id: int
    conversation_id: str
    assunto: str | None = None
    remetente_tipo: PartyType
    remetente_id: int
    destinatario_tipo: PartyType
    conteudo: str
    anexos: list[str] = []
    lida: bool
    credit_request_id: int
    company_id: int
    created_at: datetime


class ConversationSummary(CamelModel):
    conversation_id: str
    company_id: int
    credit_request_id: int
    company_name: str | None = None
    assunto: str
    last_message: str
    last_message_date: datetime
    unread_count: int
