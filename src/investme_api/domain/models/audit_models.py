from datetime import datetime
from investme_api.domain.models.camel_model import CamelModel


class AuditLogRead(CamelModel):
    id: int
    acao: str
    entidade_tipo: str
    entidade_id: int
    valor_anterior: dict | None = None
    valor_novo: dict | None = None
    observacoes: str | None = None
    admin_user_id: int
    created_at: datetime
