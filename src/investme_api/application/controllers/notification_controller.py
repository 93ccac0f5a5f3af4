# notification_controller.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.notification_models import (
    NotificationCreate, NotificationUpdate, NotificationRead, UserNotificationRead, UnreadCount, TargetUser,
)
from investme_api.domain.models.user_models import MessageResponse
from investme_api.domain.entities.enums import RoleType, AudienceType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.notification_use_cases import NotificationUseCases
from investme_api.application.use_cases.security import require_roles

router = APIRouter(tags=["notifications"], dependencies=[swagger_bearer_auth()])

admin_only = require_roles(RoleType.admin)
platform_user = require_roles(RoleType.entrepreneur, RoleType.investor)


@router.get("/admin/notifications", response_model=List[NotificationRead])
def admin_list_notifications(tipo_usuario: AudienceType | None = Query(default=None, alias="tipoUsuario"),
                             ativa: bool | None = None,
                             db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return NotificationUseCases(db).find_all(tipo_usuario=tipo_usuario, ativa=ativa)


@router.post("/admin/notifications", response_model=NotificationRead, status_code=201)
def create_notification(payload: NotificationCreate, db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    return NotificationUseCases(db).create(current.id, payload)


@router.put("/admin/notifications/{notification_id}", response_model=NotificationRead)
def update_notification(notification_id: int, payload: NotificationUpdate,
                        db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return NotificationUseCases(db).update(notification_id, payload)


@router.delete("/admin/notifications/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    NotificationUseCases(db).delete(notification_id)
    return MessageResponse(message="Notificação removida.")


@router.get("/admin/users/for-notifications", response_model=List[TargetUser])
def users_for_notifications(user_type: AudienceType | None = Query(default=None, alias="userType"),
                            db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return NotificationUseCases(db).list_targets(user_type)


@router.get("/notifications", response_model=List[UserNotificationRead])
def my_notifications(db: Session = Depends(get_db), current: UserEntity = Depends(platform_user)):
    return NotificationUseCases(db).list_for_user(current.id)


@router.get("/notifications/unread/count", response_model=UnreadCount)
def unread_count(db: Session = Depends(get_db), current: UserEntity = Depends(platform_user)):
    return UnreadCount(count=NotificationUseCases(db).unread_count_for(current.id))


@router.post("/notifications/{notification_id}/read", response_model=MessageResponse)
def mark_notification_read(notification_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(platform_user)):
    NotificationUseCases(db).mark_read(current.id, notification_id)
    return MessageResponse(message="Notificação marcada como lida.")
