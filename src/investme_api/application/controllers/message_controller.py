# message_controller.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.message_models import MessageCreate, MessageRead, ConversationSummary
from investme_api.domain.models.user_models import MessageResponse
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.message_use_cases import MessageUseCases
from investme_api.application.use_cases.security import require_roles

router = APIRouter(tags=["messages"], dependencies=[swagger_bearer_auth()])


def _message_routes(prefix: str, guard):
    # /conversations precisa ser registrada antes de /{conversation_id}
    @router.get(f"{prefix}/conversations", response_model=List[ConversationSummary], name=f"{prefix}_conversations")
    def list_conversations(db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        return MessageUseCases(db).list_conversations(current)

    @router.get(f"{prefix}/{{conversation_id}}", response_model=List[MessageRead], name=f"{prefix}_conversation")
    def get_conversation(conversation_id: str, db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        return MessageUseCases(db).get_conversation(current, conversation_id)

    @router.post(prefix, response_model=MessageRead, status_code=201, name=f"{prefix}_send")
    def send_message(payload: MessageCreate, db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        return MessageUseCases(db).send(current, payload)

    @router.patch(f"{prefix}/{{conversation_id}}/read", response_model=MessageResponse, name=f"{prefix}_read")
    def mark_read(conversation_id: str, db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        MessageUseCases(db).mark_read(current, conversation_id)
        return MessageResponse(message="Mensagens marcadas como lidas.")


_message_routes("/messages", require_roles(RoleType.entrepreneur, RoleType.investor))
_message_routes("/admin/messages", require_roles(RoleType.admin))
