"""Conversas entre empresa, investidor e back-office.

Cada conversa fica ancorada a uma solicitação de crédito (e à empresa dela)
desde a primeira mensagem. Mensagens nunca são editadas nem removidas.
"""
import logging
from sqlalchemy.orm import Session
from investme_api.adapters.repository.message_repository import MessageRepository
from investme_api.adapters.repository.credit_request_repository import CreditRequestRepository
from investme_api.adapters.repository.company_repository import CompanyRepository
from investme_api.application.utils.utils import utcnow, as_utc
from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.enums import PartyType
from investme_api.domain.entities.message_entity import Message
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.exceptions import ConflictError, NotFoundError, PermissionDenied, ValidationError
from investme_api.domain.models.message_models import MessageCreate, ConversationSummary

logger = logging.getLogger(__name__)

DEFAULT_RECIPIENT = {
    PartyType.company: PartyType.admin,
    PartyType.investor: PartyType.company,
    PartyType.admin: PartyType.company,
}


def conversation_key(company_id: int, credit_request_id: int, moment=None) -> str:
    moment = moment or utcnow()
    return f"{company_id}_{credit_request_id}_{int(moment.timestamp() * 1000)}"


class MessageUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = MessageRepository(db)
        self.repo_credit = CreditRequestRepository(db)
        self.repo_company = CompanyRepository(db)

    def _can_access(self, current: UserEntity, credit_request: CreditRequest) -> bool:
        party = current.party
        if party == PartyType.admin:
            return True
        if party == PartyType.company:
            return credit_request.company is not None and credit_request.company.owner_id == current.id
        return credit_request.investor_id == current.id

    def _involves(self, current: UserEntity, message: Message) -> bool:
        party = current.party
        return party == PartyType.admin or party in (message.remetente_tipo, message.destinatario_tipo)

    def _anchor(self, conversation_id: str) -> Message:
        first = self.repo.first_of_conversation(conversation_id)
        if first is None:
            raise NotFoundError("Conversa não encontrada")
        return first

    def _check_conversation(self, current: UserEntity, conversation_id: str) -> Message:
        first = self._anchor(conversation_id)
        credit_request = self.repo_credit.get(first.credit_request_id)
        if credit_request is None or not self._can_access(current, credit_request):
            raise PermissionDenied("Sem acesso a esta conversa")
        return first

    def send(self, current: UserEntity, payload: MessageCreate) -> Message:
        credit_request = self.repo_credit.get(payload.credit_request_id)
        if credit_request is None:
            raise NotFoundError("Solicitação de crédito não encontrada")
        if not self._can_access(current, credit_request):
            raise PermissionDenied("Sem acesso a esta solicitação de crédito")

        party = current.party
        recipient = PartyType(payload.destinatario_tipo) if payload.destinatario_tipo else DEFAULT_RECIPIENT[party]
        if recipient == party:
            raise ValidationError("Destinatário inválido")

        now = utcnow()
        assunto = payload.assunto
        conversation_id = payload.conversation_id
        if conversation_id:
            first = self.repo.first_of_conversation(conversation_id)
            if first is not None:
                if first.credit_request_id != credit_request.id:
                    raise ConflictError("Conversa pertence a outra solicitação de crédito")
                assunto = assunto or first.assunto
            elif not conversation_id.startswith(f"{credit_request.company_id}_{credit_request.id}_"):
                raise ValidationError("Identificador de conversa inválido")
        else:
            conversation_id = conversation_key(credit_request.company_id, credit_request.id, now)

        message = self.repo.create(
            conversation_id=conversation_id,
            assunto=assunto or f"Solicitação de crédito #{credit_request.id}",
            remetente_tipo=party,
            remetente_id=current.id,
            destinatario_tipo=recipient,
            conteudo=payload.conteudo,
            anexos=payload.anexos,
            lida=False,
            credit_request_id=credit_request.id,
            company_id=credit_request.company_id,
            created_at=now,
        )
        self.db.commit()
        self.db.refresh(message)
        return message

    def _visible_messages(self, current: UserEntity) -> list[Message]:
        party = current.party
        if party == PartyType.admin:
            return self.repo.list_all()
        if party == PartyType.company:
            company_ids = [c.id for c in self.repo_company.list_by_owner(current.id)]
            messages = self.repo.list_for_companies(company_ids)
        else:
            request_ids = [r.id for r in self.repo_credit.list_by_investor(current.id)]
            messages = self.repo.list_for_credit_requests(request_ids)
        return [m for m in messages if self._involves(current, m)]

    def list_conversations(self, current: UserEntity) -> list[ConversationSummary]:
        party = current.party
        grouped: dict[str, list[Message]] = {}
        for message in self._visible_messages(current):
            grouped.setdefault(message.conversation_id, []).append(message)

        summaries = []
        for conversation_id, messages in grouped.items():
            first, last = messages[0], messages[-1]
            company = self.repo_company.get(first.company_id)
            summaries.append(ConversationSummary(
                conversation_id=conversation_id,
                company_id=first.company_id,
                credit_request_id=first.credit_request_id,
                company_name=company.razao_social if company else None,
                assunto=first.assunto or "",
                last_message=last.conteudo,
                last_message_date=as_utc(last.created_at),
                unread_count=sum(1 for m in messages if m.destinatario_tipo == party and not m.lida),
            ))
        summaries.sort(key=lambda s: s.last_message_date, reverse=True)
        return summaries

    def get_conversation(self, current: UserEntity, conversation_id: str) -> list[Message]:
        self._check_conversation(current, conversation_id)
        return [m for m in self.repo.list_conversation(conversation_id) if self._involves(current, m)]

    def mark_read(self, current: UserEntity, conversation_id: str) -> int:
        self._check_conversation(current, conversation_id)
        updated = self.repo.mark_read(conversation_id, current.party)
        self.db.commit()
        return updated
