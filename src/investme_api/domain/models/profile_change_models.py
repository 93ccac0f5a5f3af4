from datetime import datetime
from pydantic import ConfigDict, EmailStr, field_validator
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.models.user_models import AddressFields
from investme_api.domain.entities.enums import RoleType, ChangeStatus


class ProfileUpdateRequest(AddressFields):
    """Campos do perfil que o próprio usuário pode propor alterar."""

    model_config = ConfigDict(extra="forbid")

    nome_completo: str | None = None
    email: EmailStr | None = None
    telefone: str | None = None
    limite_investimento: str | None = None

    # omitidos ficam como estão; enviados não podem apagar o valor
    @field_validator("nome_completo", "email", mode="before")
    @classmethod
    def _required_when_sent(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("campo obrigatório não pode ficar vazio")
        return value


class ChangeOwner(CamelModel):
    id: int
    nome_completo: str
    email: str


class PendingChangeRead(CamelModel):
    id: int
    user_id: int
    user_type: RoleType
    changed_fields: dict
    status: ChangeStatus
    requested_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: int | None = None
    review_comment: str | None = None
    user: ChangeOwner | None = None


class ReviewRequest(CamelModel):
    approved: bool
    comment: str | None = None


class ChangeSubmitted(CamelModel):
    message: str
    id: int
