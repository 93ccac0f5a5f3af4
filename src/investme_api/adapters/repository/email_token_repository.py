import secrets
from datetime import timedelta
from sqlalchemy.orm import Session
from sqlalchemy import select, update
from investme_api.domain.entities.email_token_entity import EmailConfirmationToken
from investme_api.domain.entities.enums import RoleType
from investme_api.application.utils.utils import utcnow

TOKEN_TTL = timedelta(hours=24)


class EmailTokenRepository:
    def __init__(self, db: Session):
        self.db = db

    def issue(self, user_id: int, role: RoleType) -> EmailConfirmationToken:
        # invalida tokens anteriores do mesmo perfil
        self.db.execute(
            update(EmailConfirmationToken)
            .where(
                EmailConfirmationToken.user_id == user_id,
                EmailConfirmationToken.role == role,
                EmailConfirmationToken.used.is_(False),
            )
            .values(used=True)
        )
        token = EmailConfirmationToken(
            token=secrets.token_hex(32),
            user_id=user_id,
            role=role,
            expires_at=utcnow() + TOKEN_TTL,
            used=False,
        )
        self.db.add(token)
        self.db.flush()
        return token

    def get(self, token: str) -> EmailConfirmationToken | None:
        query = select(EmailConfirmationToken).where(EmailConfirmationToken.token == token)
        return self.db.execute(query).scalar_one_or_none()

    def consume(self, token_id: int) -> int:
        query = (
            update(EmailConfirmationToken)
            .where(EmailConfirmationToken.id == token_id, EmailConfirmationToken.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(query).rowcount
