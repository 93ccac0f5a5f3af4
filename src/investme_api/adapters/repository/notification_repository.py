from sqlalchemy.orm import Session
from sqlalchemy import select
from investme_api.domain.entities.notification_entity import PlatformNotification, NotificationRead
from investme_api.domain.entities.enums import AudienceType


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, notification_id: int) -> PlatformNotification | None:
        return self.db.get(PlatformNotification, notification_id)

    def find_all(self, tipo_usuario: AudienceType | None = None, ativa: bool | None = None) -> list[PlatformNotification]:
        query = select(PlatformNotification).order_by(
            PlatformNotification.created_at.desc(), PlatformNotification.id.desc()
        )
        if tipo_usuario is not None:
            query = query.where(PlatformNotification.tipo_usuario == tipo_usuario)
        if ativa is not None:
            query = query.where(PlatformNotification.ativa.is_(ativa))
        return list(self.db.execute(query).scalars().all())

    def list_active(self) -> list[PlatformNotification]:
        return self.find_all(ativa=True)

    def create(self, **data) -> PlatformNotification:
        notification = PlatformNotification(**data)
        self.db.add(notification)
        self.db.flush()
        return notification

    def update_fields(self, notification: PlatformNotification, values: dict) -> PlatformNotification:
        for attr, value in values.items():
            setattr(notification, attr, value)
        self.db.flush()
        return notification

    def delete(self, notification: PlatformNotification) -> None:
        self.db.delete(notification)
        self.db.flush()

    def read_ids(self, user_id: int) -> set[int]:
        query = select(NotificationRead.notification_id).where(NotificationRead.user_id == user_id)
        return set(self.db.execute(query).scalars().all())

    def has_read(self, notification_id: int, user_id: int) -> bool:
        query = select(NotificationRead.id).where(
            NotificationRead.notification_id == notification_id,
            NotificationRead.user_id == user_id,
        )
        return self.db.execute(query).first() is not None

    def add_read(self, notification_id: int, user_id: int, read_at) -> NotificationRead:
        read = NotificationRead(notification_id=notification_id, user_id=user_id, read_at=read_at)
        self.db.add(read)
        self.db.flush()
        return read
