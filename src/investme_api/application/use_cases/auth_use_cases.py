import logging
import smtplib
from typing import Tuple
from sqlalchemy.orm import Session
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.adapters.repository.email_token_repository import EmailTokenRepository
from investme_api.application.use_cases.security import (
    create_access_token, verify_password, hash_password, decode_token, RESET_TOKEN_EXPIRE_MINUTES,
)
from investme_api.application.utils.email_service import (
    send_email_html, reset_password_template, email_confirmation_template,
    FRONTEND_RESET_URL, FRONTEND_CONFIRM_URL,
)
from investme_api.application.utils.utils import utcnow, as_utc
from investme_api.domain.entities.user_entity import User
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.exceptions import AuthError, ConflictError, ValidationError, RoleNotHeld, NotFoundError
from investme_api.domain.models.user_models import RegisterRequest, UserRead, RoleSummary
from investme_api.domain.services.role_approval import role_summary

logger = logging.getLogger(__name__)

# perfil usado quando o login não informa qual
LOGIN_ROLE_PREFERENCE = (RoleType.entrepreneur, RoleType.investor, RoleType.admin)


def to_user_read(user: User) -> UserRead:
    read = UserRead.model_validate(user)
    return read.model_copy(update={"approvals": [RoleSummary(**item) for item in role_summary(user)]})


class AuthenticationUseCases:
    """Cadastro, login, confirmação de e-mail e senhas."""

    def __init__(self, db: Session):
        self.db = db
        self.repo_user = UserRepository(db)
        self.repo_token = EmailTokenRepository(db)

    def register(self, payload: RegisterRequest, role: RoleType) -> User:
        """Cria a conta ou acrescenta ``role`` a uma conta existente do mesmo e-mail.

        Acrescentar um perfil exige a senha atual da conta. Administradores
        não podem acumular perfis de empreendedor ou investidor.
        """
        role = RoleType(role)
        if role == RoleType.admin:
            raise ValidationError("Administradores são criados pelo back-office")

        user = self.repo_user.get_by_email(payload.email)
        by_cpf = self.repo_user.get_by_cpf(payload.cpf)
        if by_cpf is not None and (user is None or by_cpf.id != user.id):
            raise ConflictError("CPF já cadastrado")

        if user is None:
            user = self.repo_user.create(
                email=payload.email,
                hashed_password=hash_password(payload.senha),
                nome_completo=payload.nome_completo,
                cpf=payload.cpf,
                rg=payload.rg,
                telefone=payload.telefone,
                cep=payload.cep,
                rua=payload.rua,
                numero=payload.numero,
                complemento=payload.complemento,
                bairro=payload.bairro,
                cidade=payload.cidade,
                estado=payload.estado,
                limite_investimento=payload.limite_investimento if role == RoleType.investor else None,
            )
        else:
            self._ensure_can_add_role(user, role, payload.senha)
            if role == RoleType.investor and payload.limite_investimento:
                user.limite_investimento = payload.limite_investimento

        self.repo_user.add_role(user, role)
        token = self.repo_token.issue(user.id, role)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Perfil %s registrado para o usuário %s", role.value, user.id)

        self._send_confirmation(user, token.token)
        return user

    def _ensure_can_add_role(self, user: User, role: RoleType, senha: str) -> None:
        held = user.role_types
        if RoleType.admin in held:
            raise ConflictError("Conta administrativa não pode ter outros perfis")
        if role in held:
            raise ConflictError("E-mail já cadastrado")
        if not verify_password(senha, user.hashed_password):
            raise ConflictError("E-mail já cadastrado com outra senha")

    def login(self, *, login: str, senha: str, role: RoleType | None = None) -> Tuple[str, User, RoleType]:
        user = self.repo_user.get_by_login(login)
        if not user or not verify_password(senha, user.hashed_password):
            logger.warning("Tentativa de login inválida para %s", login)
            raise AuthError("Credenciais inválidas")
        if not user.is_active:
            raise AuthError("Conta desativada")

        if role is None:
            role = next((r for r in LOGIN_ROLE_PREFERENCE if r in user.role_types), None)
            if role is None:
                raise AuthError("Conta sem perfil ativo")
        elif user.get_role(role) is None:
            raise RoleNotHeld(RoleType(role).value)

        token = create_access_token(email=user.email, role=role)
        return token, user, RoleType(role)

    def get_user(self, user_id: int) -> User:
        user = self.repo_user.get_by_id(user_id)
        if not user:
            raise NotFoundError("Usuário não encontrado")
        return user

    def change_password(self, user_id: int, senha_atual: str, nova_senha: str) -> None:
        user = self.repo_user.get_by_id(user_id)
        if not user:
            raise AuthError("Usuário não encontrado")
        if not verify_password(senha_atual, user.hashed_password):
            raise ValidationError("Senha atual incorreta")
        self.repo_user.update_password(user, hash_password(nova_senha))
        self.db.commit()

    def request_email_confirmation(self, email: str, role: RoleType) -> None:
        user = self.repo_user.get_by_email(email)
        if not user or user.get_role(role) is None:
            return
        token = self.repo_token.issue(user.id, RoleType(role))
        self.db.commit()
        self._send_confirmation(user, token.token)

    def confirm_email(self, token: str) -> RoleType:
        record = self.repo_token.get(token)
        if record is None or record.used or as_utc(record.expires_at) < utcnow():
            raise ValidationError("Token de confirmação inválido ou expirado")
        if self.repo_token.consume(record.id) == 0:
            raise ValidationError("Token de confirmação inválido ou expirado")
        user = self.repo_user.get_by_id(record.user_id)
        held = user.get_role(record.role) if user else None
        if held is None:
            raise ValidationError("Token de confirmação inválido ou expirado")
        held.email_confirmado = True
        self.db.commit()
        logger.info("E-mail confirmado para o usuário %s (%s)", user.id, record.role.value)
        return record.role

    def forgot_password(self, email: str) -> None:
        user = self.repo_user.get_by_email(email)
        if not user:
            return

        role = next((r for r in LOGIN_ROLE_PREFERENCE if r in user.role_types), RoleType.entrepreneur)
        reset_token = create_access_token(
            email=user.email,
            role=role,
            expires_minutes=RESET_TOKEN_EXPIRE_MINUTES,
            purpose="reset",
        )
        html = reset_password_template(
            reset_url=f"{FRONTEND_RESET_URL}?token={reset_token}",
            user_name=user.nome_completo,
        )
        self._deliver(user.email, "Redefinição de Senha - Investme", html)

    def reset_password(self, token: str, new_password: str) -> None:
        try:
            data = decode_token(token, purpose="reset")
        except AuthError:
            raise ValidationError("Token inválido ou expirado")

        user = self.repo_user.get_by_email(data.sub)
        if not user:
            raise ValidationError("Token inválido")

        self.repo_user.update_password(user, hash_password(new_password))
        self.db.commit()

    def _send_confirmation(self, user: User, token: str) -> None:
        html = email_confirmation_template(
            confirm_url=f"{FRONTEND_CONFIRM_URL}?token={token}",
            user_name=user.nome_completo,
        )
        self._deliver(user.email, "Confirme seu e-mail - Investme", html)

    def _deliver(self, to_email: str, subject: str, html: str) -> None:
        # falha de entrega não desfaz a operação já confirmada
        try:
            send_email_html(to_email=to_email, subject=subject, html_content=html)
        except (smtplib.SMTPException, OSError):
            logger.exception("Falha ao enviar e-mail '%s' para %s", subject, to_email)
