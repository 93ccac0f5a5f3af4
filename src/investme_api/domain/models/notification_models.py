from datetime import datetime
from pydantic import Field
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import AudienceType, RoleType


class NotificationCreate(CamelModel):
    titulo: str = Field(min_length=1, max_length=255)
    conteudo: str = Field(min_length=1)
    tipo_usuario: AudienceType = AudienceType.both
    usuario_especifico_id: int | None = None
    usuario_especifico_tipo: RoleType | None = None
    ativa: bool = True


class NotificationUpdate(CamelModel):
    titulo: str | None = Field(default=None, min_length=1, max_length=255)
    conteudo: str | None = Field(default=None, min_length=1)
    tipo_usuario: AudienceType | None = None
    usuario_especifico_id: int | None = None
    usuario_especifico_tipo: RoleType | None = None
    ativa: bool | None = None


class NotificationRead(CamelModel):
    id: int
    titulo: str
    conteudo: str
    tipo_usuario: AudienceType
    usuario_especifico_id: int | None = None
    usuario_especifico_tipo: RoleType | None = None
    ativa: bool
    criado_por: int
    created_at: datetime


class UserNotificationRead(NotificationRead):
    lida: bool = False


class UnreadCount(CamelModel):
    count: int


class TargetUser(CamelModel):
    id: int
    nome: str
    email: str
    tipo: RoleType
