# auth_controller.py
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.user_models import (
    RegisterRequest, UserRegisterRequest, UserRead, LoginRequest, AdminLoginRequest, LoginResponse, MeResponse,
    ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest,
    EmailConfirmationRequest, EmailConfirmationConfirm, MessageResponse,
)
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.exceptions import ConflictError
from investme_api.application.use_cases.auth_use_cases import AuthenticationUseCases, to_user_read
from investme_api.application.use_cases.security import get_current_user
from investme_api.application.utils.utils import dup_key_on

router = APIRouter(tags=["auth"])

logger = logging.getLogger(__name__)

GENERIC_EMAIL_MESSAGE = "Se o e-mail existir no sistema, enviaremos as instruções."


def _register(payload: RegisterRequest, role: RoleType, db: Session) -> UserRead:
    uc = AuthenticationUseCases(db)
    try:
        user = uc.register(payload, role)
    except IntegrityError as e:
        db.rollback()
        if dup_key_on(e, "email"):
            raise ConflictError("E-mail já cadastrado")
        if dup_key_on(e, "cpf"):
            raise ConflictError("CPF já cadastrado")
        logger.exception("Integrity error ao registrar usuário")
        raise ConflictError("Violação de integridade nos dados informados")
    return to_user_read(user)


def _login(db: Session, login: str, senha: str, role: RoleType | None) -> LoginResponse:
    uc = AuthenticationUseCases(db)
    token, user, session_role = uc.login(login=login, senha=senha, role=role)
    return LoginResponse(access_token=token, role=session_role, user=to_user_read(user))


@router.post("/auth/register", response_model=UserRead, status_code=201)
def register(payload: UserRegisterRequest, db: Session = Depends(get_db)):
    return _register(payload, payload.tipo, db)


@router.post("/entrepreneurs/register", response_model=UserRead, status_code=201)
def register_entrepreneur(payload: RegisterRequest, db: Session = Depends(get_db)):
    return _register(payload, RoleType.entrepreneur, db)


@router.post("/investors/register", response_model=UserRead, status_code=201)
def register_investor(payload: RegisterRequest, db: Session = Depends(get_db)):
    return _register(payload, RoleType.investor, db)


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, payload.login, payload.senha, payload.role)


@router.post("/entrepreneurs/login", response_model=LoginResponse)
def login_entrepreneur(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, payload.login, payload.senha, RoleType.entrepreneur)


@router.post("/investors/login", response_model=LoginResponse)
def login_investor(payload: LoginRequest, db: Session = Depends(get_db)):
    return _login(db, payload.login, payload.senha, RoleType.investor)


@router.post("/admin/auth/login", response_model=LoginResponse)
def login_admin(payload: AdminLoginRequest, db: Session = Depends(get_db)):
    return _login(db, payload.email, payload.senha, RoleType.admin)


@router.get("/auth/me", response_model=MeResponse, dependencies=[swagger_bearer_auth()])
def me(current: UserEntity = Depends(get_current_user), db: Session = Depends(get_db)):
    user = AuthenticationUseCases(db).get_user(current.id)
    read = to_user_read(user)
    return MeResponse(**read.model_dump(), session_role=current.role)


@router.put("/auth/change-password", response_model=MessageResponse, dependencies=[swagger_bearer_auth()])
def change_password(payload: ChangePasswordRequest,
                    db: Session = Depends(get_db),
                    current: UserEntity = Depends(get_current_user)):
    AuthenticationUseCases(db).change_password(current.id, payload.senha_atual, payload.nova_senha)
    return MessageResponse(message="Senha alterada com sucesso.")


@router.post("/email-confirmation/request", response_model=MessageResponse)
def request_email_confirmation(payload: EmailConfirmationRequest, db: Session = Depends(get_db)):
    AuthenticationUseCases(db).request_email_confirmation(payload.email, payload.user_type)
    # Nunca revelar se o e-mail existe ou não
    return MessageResponse(message=GENERIC_EMAIL_MESSAGE)


@router.post("/email-confirmation/confirm", response_model=MessageResponse)
def confirm_email(payload: EmailConfirmationConfirm, db: Session = Depends(get_db)):
    AuthenticationUseCases(db).confirm_email(payload.token)
    return MessageResponse(message="E-mail confirmado com sucesso.")


@router.post("/password-reset/request", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    AuthenticationUseCases(db).forgot_password(email=payload.email)
    return MessageResponse(message=GENERIC_EMAIL_MESSAGE)


@router.post("/password-reset/confirm", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    AuthenticationUseCases(db).reset_password(token=payload.token, new_password=payload.nova_senha)
    return MessageResponse(message="Senha redefinida com sucesso.")
