from datetime import datetime
from pydantic import Field
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import CreditRequestStatus

MAX_DOCUMENTS = 10


class CreditRequestCreate(CamelModel):
    company_id: int
    valor_solicitado: float = Field(gt=0)
    prazo_meses: int = Field(gt=0, le=360)
    finalidade: str = Field(min_length=3)
    documentos: list[str] = Field(default_factory=list, max_length=MAX_DOCUMENTS)


class CreditRequestRead(CamelModel):
    id: int
    company_id: int
    valor_solicitado: float
    prazo_meses: int
    finalidade: str
    documentos: list[str] = []
    status: CreditRequestStatus
    investor_id: int | None = None
    data_aceite: datetime | None = None
    observacoes_analise: str | None = None
    analisado_por: int | None = None
    data_analise: datetime | None = None
    created_at: datetime | None = None
    company_razao_social: str | None = None


class CreditRequestAdminUpdate(CamelModel):
    status: CreditRequestStatus | None = None
    observacoes_analise: str | None = None
