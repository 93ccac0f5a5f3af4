import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from investme_api.adapters.repository.notification_repository import NotificationRepository
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.application.utils.utils import utcnow
from investme_api.domain.entities.enums import AudienceType, RoleType
from investme_api.domain.entities.notification_entity import PlatformNotification
from investme_api.domain.exceptions import NotFoundError, ValidationError
from investme_api.domain.models.notification_models import (
    NotificationCreate, NotificationUpdate, UserNotificationRead, TargetUser,
)
from investme_api.domain.services.notification_targeting import is_addressed_to, AUDIENCE_ROLES

logger = logging.getLogger(__name__)


class NotificationUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)
        self.repo_user = UserRepository(db)

    def _get(self, notification_id: int) -> PlatformNotification:
        notification = self.repo.get(notification_id)
        if notification is None:
            raise NotFoundError("Notificação não encontrada")
        return notification

    def _check_target(self, user_id: int | None) -> None:
        if user_id is not None and self.repo_user.get_by_id(user_id) is None:
            raise ValidationError("Usuário destinatário não encontrado")

    # Back-office
    def create(self, admin_id: int, payload: NotificationCreate) -> PlatformNotification:
        self._check_target(payload.usuario_especifico_id)
        notification = self.repo.create(criado_por=admin_id, created_at=utcnow(), **payload.model_dump())
        self.db.commit()
        self.db.refresh(notification)
        logger.info("Notificação %s criada por %s", notification.id, admin_id)
        return notification

    def find_all(self, tipo_usuario: AudienceType | None = None, ativa: bool | None = None) -> list[PlatformNotification]:
        return self.repo.find_all(tipo_usuario=tipo_usuario, ativa=ativa)

    def update(self, notification_id: int, payload: NotificationUpdate) -> PlatformNotification:
        notification = self._get(notification_id)
        values = payload.model_dump(exclude_unset=True)
        if "usuario_especifico_id" in values:
            self._check_target(values["usuario_especifico_id"])
        self.repo.update_fields(notification, values)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def delete(self, notification_id: int) -> None:
        self.repo.delete(self._get(notification_id))
        self.db.commit()
        logger.info("Notificação %s removida", notification_id)

    def list_targets(self, user_type: AudienceType | None = None) -> list[TargetUser]:
        """Usuários ativos que podem receber uma notificação direcionada."""
        audience = AudienceType(user_type) if user_type else AudienceType.both
        roles = AUDIENCE_ROLES[audience]
        targets = []
        for user in self.repo_user.list_active_with_roles(roles):
            for role in sorted(user.role_types & roles, key=lambda r: r.value):
                targets.append(TargetUser(id=user.id, nome=user.nome_completo, email=user.email, tipo=role))
        return targets

    # Usuário
    def _addressed(self, user_id: int) -> list[PlatformNotification]:
        user = self.repo_user.get_by_id(user_id)
        if user is None:
            return []
        return [n for n in self.repo.list_active() if is_addressed_to(n, user)]

    def list_for_user(self, user_id: int) -> list[UserNotificationRead]:
        read_ids = self.repo.read_ids(user_id)
        return [
            UserNotificationRead.model_validate(n).model_copy(update={"lida": n.id in read_ids})
            for n in self._addressed(user_id)
        ]

    def unread_count_for(self, user_id: int) -> int:
        read_ids = self.repo.read_ids(user_id)
        return sum(1 for n in self._addressed(user_id) if n.id not in read_ids)

    def mark_read(self, user_id: int, notification_id: int) -> None:
        """Idempotente: marcar de novo uma notificação lida não tem efeito."""
        notification = self.repo.get(notification_id)
        user = self.repo_user.get_by_id(user_id)
        if notification is None or user is None or not is_addressed_to(notification, user):
            raise NotFoundError("Notificação não encontrada")
        if self.repo.has_read(notification_id, user_id):
            return
        try:
            self.repo.add_read(notification_id, user_id, utcnow())
            self.db.commit()
        except IntegrityError:
            # leitura concorrente já registrada
            self.db.rollback()
