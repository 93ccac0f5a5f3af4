from datetime import datetime
from pydantic import Field, EmailStr, field_validator, model_validator
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import CompanyStatus, GuaranteeType
from investme_api.application.utils.utils import only_digits, is_valid_cnpj, is_valid_cpf

MAX_COMPANY_IMAGES = 10
# colunas NOT NULL de companies que o dono pode editar
REQUIRED_COMPANY_FIELDS = frozenset({
    "razao_social", "cnpj", "cep", "rua", "numero", "bairro", "cidade", "estado",
    "cnae_principal", "faturamento", "ebitda", "divida_liquida", "cnae_secundarios", "images",
})


class ShareholderIn(CamelModel):
    nome_completo: str
    cpf: str

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, value):
        if not is_valid_cpf(value):
            raise ValueError("CPF do sócio inválido")
        return only_digits(value)


class ShareholderRead(ShareholderIn):
    id: int


class GuaranteeIn(CamelModel):
    tipo: GuaranteeType
    matricula: str | None = None
    renavam: str | None = None
    descricao: str | None = None
    valor_estimado: float = Field(ge=0)


class GuaranteeRead(GuaranteeIn):
    id: int


class CompanyBase(CamelModel):
    nome_fantasia: str | None = None
    complemento: str | None = None
    telefone: str | None = None
    email_contato: EmailStr | None = None
    cnae_secundarios: list[str] = []
    inscricao_estadual: str | None = None
    inscricao_municipal: str | None = None
    data_fundacao: datetime | None = None
    numero_funcionarios: int | None = Field(default=None, ge=0)
    descricao_negocio: str | None = None
    images: list[str] = Field(default_factory=list, max_length=MAX_COMPANY_IMAGES)


class CompanyCreate(CompanyBase):
    razao_social: str = Field(min_length=2)
    cnpj: str
    cep: str
    rua: str
    numero: str
    bairro: str
    cidade: str
    estado: str = Field(min_length=2, max_length=2)
    cnae_principal: str
    faturamento: float = Field(ge=0)
    ebitda: float
    divida_liquida: float
    shareholders: list[ShareholderIn] = []
    guarantees: list[GuaranteeIn] = []

    @field_validator("cnpj")
    @classmethod
    def _cnpj(cls, value):
        if not is_valid_cnpj(value):
            raise ValueError("CNPJ inválido")
        return only_digits(value)

    @field_validator("cep")
    @classmethod
    def _cep(cls, value):
        digits = only_digits(value)
        if len(digits) != 8:
            raise ValueError("CEP inválido")
        return digits


class CompanyUpdate(CamelModel):
    razao_social: str | None = None
    nome_fantasia: str | None = None
    cnpj: str | None = None
    cep: str | None = None
    rua: str | None = None
    numero: str | None = None
    complemento: str | None = None
    bairro: str | None = None
    cidade: str | None = None
    estado: str | None = None
    telefone: str | None = None
    email_contato: EmailStr | None = None
    cnae_principal: str | None = None
    cnae_secundarios: list[str] | None = None
    data_fundacao: datetime | None = None
    faturamento: float | None = None
    ebitda: float | None = None
    divida_liquida: float | None = None
    numero_funcionarios: int | None = None
    descricao_negocio: str | None = None
    images: list[str] | None = Field(default=None, max_length=MAX_COMPANY_IMAGES)

    @field_validator("cnpj")
    @classmethod
    def _cnpj(cls, value):
        if value is None:
            return value
        if not is_valid_cnpj(value):
            raise ValueError("CNPJ inválido")
        return only_digits(value)

    @field_validator("cep")
    @classmethod
    def _cep(cls, value):
        if value is None:
            return value
        digits = only_digits(value)
        if len(digits) != 8:
            raise ValueError("CEP inválido")
        return digits

    @model_validator(mode="after")
    def _required_not_cleared(self):
        cleared = []
        for name in REQUIRED_COMPANY_FIELDS & self.model_fields_set:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                cleared.append(name)
        if cleared:
            raise ValueError(f"Campo obrigatório não pode ficar vazio: {sorted(cleared)[0]}")
        return self


class CompanyRead(CompanyBase):
    id: int
    owner_id: int
    razao_social: str
    cnpj: str
    cep: str
    rua: str
    numero: str
    bairro: str
    cidade: str
    estado: str
    cnae_principal: str
    faturamento: float
    ebitda: float
    divida_liquida: float
    status: CompanyStatus
    motivo_reprovacao: str | None = None
    data_analise: datetime | None = None
    created_at: datetime | None = None
    shareholders: list[ShareholderRead] = []
    guarantees: list[GuaranteeRead] = []
    valuation: float | None = None


class CompanyAdminRead(CompanyRead):
    observacoes_internas: str | None = None
    analisado_por: int | None = None


class CompanyAdminUpdate(CamelModel):
    status: CompanyStatus | None = None
    reason: str | None = None
    observacoes_internas: str | None = None


class NetworkCompanyRead(CamelModel):
    id: int
    razao_social: str
    nome_fantasia: str | None = None
    cidade: str
    estado: str
    cnae_principal: str
    faturamento: float
    numero_funcionarios: int | None = None
    descricao_negocio: str | None = None
    images: list[str] = []
    valuation: float | None = None
