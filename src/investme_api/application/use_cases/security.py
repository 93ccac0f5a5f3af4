# security.py
import os
import logging
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import http_bearer
from investme_api.domain.models.user_models import TokenPayload
from investme_api.domain.entities.user_entity import User as UserORM
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.exceptions import AuthError, PermissionDenied, RoleNotHeld

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
)

JWT_SECRET = os.environ.get("JWT_SECRET", "change_this_in_prod")
ALGORITHM = "HS256"
# 7 dias, mesmo tempo de vida dos tokens do app web
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
RESET_TOKEN_EXPIRE_MINUTES = 15
JWT_LEEWAY_SECONDS = int(os.environ.get("JWT_LEEWAY_SECONDS", "30"))


def hash_password(raw: str) -> str:
    if not isinstance(raw, str):
        raise TypeError("Password must be a string")
    return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    if not isinstance(raw, str):
        return False
    return pwd_context.verify(raw, hashed)


def create_access_token(*, email: str, role: RoleType, expires_minutes: int | None = None, purpose: str | None = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": email, "role": RoleType(role).value, "exp": expire}
    if purpose:
        payload["typ"] = purpose
    return jwt.encode(payload, JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str, purpose: str | None = None) -> TokenPayload:
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"verify_exp": True, "leeway": JWT_LEEWAY_SECONDS},
        )
    except JWTError:
        raise AuthError()
    if payload.get("typ") != purpose:
        raise AuthError()
    try:
        return TokenPayload(sub=payload.get("sub"), role=payload.get("role"))
    except ValidationError:
        raise AuthError()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    db: Session = Depends(get_db),
) -> UserEntity:
    if credentials is None or not credentials.credentials:
        raise AuthError("Token de acesso não informado")
    payload = decode_token(credentials.credentials)
    user: UserORM | None = db.query(UserORM).filter(UserORM.email == payload.sub).first()
    if not user or not user.is_active:
        raise AuthError("Usuário não encontrado ou inativo")
    if user.get_role(payload.role) is None:
        raise RoleNotHeld(payload.role.value)
    return UserEntity(
        id=user.id,
        email=user.email,
        nome_completo=user.nome_completo,
        role=payload.role,
        is_active=user.is_active,
        roles=frozenset(user.role_types),
    )


def require_roles(*allowed: RoleType):
    def _checker(current: UserEntity = Depends(get_current_user)) -> UserEntity:
        if current.role not in allowed:
            logger.warning("Acesso negado para %s com perfil %s", current.email, current.role.value)
            raise PermissionDenied("Permissões insuficientes")
        return current
    return _checker
