# schemas.py
from pydantic import EmailStr, Field, field_validator, model_validator
from datetime import datetime
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import RoleType, RegistrationStatus, AdminProfile
from investme_api.application.utils.utils import only_digits, is_valid_cpf


class AddressFields(CamelModel):
    cep: str | None = None
    rua: str | None = None
    numero: str | None = None
    complemento: str | None = None
    bairro: str | None = None
    cidade: str | None = None
    estado: str | None = None

    @field_validator("cep")
    @classmethod
    def _cep(cls, value):
        if value is None:
            return value
        digits = only_digits(value)
        if len(digits) != 8:
            raise ValueError("CEP inválido")
        return digits

    @field_validator("estado")
    @classmethod
    def _estado(cls, value):
        if value is None:
            return value
        if len(value.strip()) != 2:
            raise ValueError("UF inválida")
        return value.strip().upper()


class RegisterRequest(AddressFields):
    email: EmailStr
    cpf: str
    rg: str | None = None
    nome_completo: str = Field(min_length=3)
    senha: str = Field(min_length=8)
    confirmar_senha: str | None = None
    telefone: str | None = None
    limite_investimento: str | None = None

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, value):
        if not is_valid_cpf(value):
            raise ValueError("CPF inválido")
        return only_digits(value)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.confirmar_senha is not None and self.confirmar_senha != self.senha:
            raise ValueError("As senhas não conferem")
        return self


class UserRegisterRequest(RegisterRequest):
    tipo: RoleType = RoleType.entrepreneur

    @field_validator("tipo")
    @classmethod
    def _tipo(cls, value):
        if value == RoleType.admin:
            raise ValueError("Tipo de usuário inválido")
        return value


class LoginRequest(CamelModel):
    login: str  # email ou CPF
    senha: str
    role: RoleType | None = None


class AdminLoginRequest(CamelModel):
    email: EmailStr
    senha: str


class RoleSummary(CamelModel):
    role: RoleType
    status: RegistrationStatus
    fully_approved: bool
    missing_requirements: list[str]


class UserRead(AddressFields):
    id: int
    email: EmailStr
    cpf: str | None = None
    rg: str | None = None
    nome_completo: str
    telefone: str | None = None
    limite_investimento: str | None = None
    is_active: bool
    status_changed_at: datetime | None = None
    approvals: list[RoleSummary] = []


class MeResponse(UserRead):
    session_role: RoleType


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    role: RoleType
    user: UserRead


class TokenPayload(CamelModel):
    sub: str  # email
    role: RoleType


class ChangePasswordRequest(CamelModel):
    senha_atual: str
    nova_senha: str = Field(min_length=8)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    nova_senha: str = Field(min_length=8)


class EmailConfirmationRequest(CamelModel):
    email: EmailStr
    user_type: RoleType


class EmailConfirmationConfirm(CamelModel):
    token: str


class RegistrationRead(CamelModel):
    """Cadastro de um perfil visto pelo back-office."""

    id: int
    email: EmailStr
    cpf: str | None = None
    nome_completo: str
    telefone: str | None = None
    cidade: str | None = None
    estado: str | None = None
    limite_investimento: str | None = None
    is_active: bool
    role: RoleType
    status: RegistrationStatus
    cadastro_aprovado: bool
    email_confirmado: bool
    documentos_verificados: bool
    renda_comprovada: bool
    perfil_investidor: bool
    motivo_reprovacao: str | None = None
    aprovado_por: int | None = None
    aprovado_em: datetime | None = None
    fully_approved: bool
    missing_requirements: list[str]


class RejectRequest(CamelModel):
    reason: str = ""


class ApproveFieldRequest(CamelModel):
    field: str
    approved: bool


class AdminUserCreate(CamelModel):
    email: EmailStr
    nome_completo: str = Field(min_length=3)
    senha: str = Field(min_length=8)
    admin_perfil: AdminProfile = AdminProfile.visualizacao


class AdminUserUpdate(CamelModel):
    nome_completo: str | None = None
    admin_perfil: AdminProfile | None = None
    is_active: bool | None = None


class AdminUserRead(CamelModel):
    id: int
    email: EmailStr
    nome_completo: str
    admin_perfil: AdminProfile | None = None
    is_active: bool
    created_at: datetime | None = None


class MessageResponse(CamelModel):
    message: str
