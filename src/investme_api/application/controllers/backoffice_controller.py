# backoffice_controller.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.user_models import (
    RegistrationRead, RejectRequest, ApproveFieldRequest, AdminUserCreate, AdminUserUpdate, AdminUserRead,
)
from investme_api.domain.models.profile_change_models import PendingChangeRead, ReviewRequest
from investme_api.domain.models.audit_models import AuditLogRead
from investme_api.domain.entities.enums import RoleType, RegistrationStatus, ChangeStatus
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.registration_use_cases import RegistrationUseCases
from investme_api.application.use_cases.profile_change_use_cases import ProfileChangeUseCases
from investme_api.application.use_cases.admin_use_cases import AdminUseCases
from investme_api.application.use_cases.security import require_roles

admin_only = require_roles(RoleType.admin)

router = APIRouter(prefix="/admin", tags=["backoffice"], dependencies=[swagger_bearer_auth()])


# Cadastros de empreendedores e investidores
def _registration_routes(segment: str, role: RoleType):
    @router.get(f"/{segment}", response_model=List[RegistrationRead], name=f"list_{segment}")
    def list_registrations(status: RegistrationStatus | None = None,
                           db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
        return RegistrationUseCases(db).list_registrations(role, status)

    @router.post(f"/{segment}/{{user_id}}/approve", response_model=RegistrationRead, name=f"approve_{segment}")
    def approve(user_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
        return RegistrationUseCases(db).approve(user_id, role, current.id)

    @router.post(f"/{segment}/{{user_id}}/reject", response_model=RegistrationRead, name=f"reject_{segment}")
    def reject(user_id: int, payload: RejectRequest,
               db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
        return RegistrationUseCases(db).reject(user_id, role, current.id, payload.reason)

    @router.patch(f"/{segment}/{{user_id}}/approve-field", response_model=RegistrationRead, name=f"approve_field_{segment}")
    def approve_field(user_id: int, payload: ApproveFieldRequest,
                      db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
        return RegistrationUseCases(db).approve_field(user_id, role, current.id, payload.field, payload.approved)


_registration_routes("entrepreneurs", RoleType.entrepreneur)
_registration_routes("investors", RoleType.investor)


# Alterações de perfil
@router.get("/pending-profile-changes", response_model=List[PendingChangeRead])
def list_pending_changes(status: ChangeStatus | None = None,
                         user_type: RoleType | None = Query(default=None, alias="userType"),
                         db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return ProfileChangeUseCases(db).list_changes(status=status, user_type=user_type)


@router.post("/pending-profile-changes/{change_id}/review", response_model=PendingChangeRead)
def review_pending_change(change_id: int, payload: ReviewRequest,
                          db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    return ProfileChangeUseCases(db).review(change_id, current.id, payload.approved, payload.comment)


# Usuários do back-office
@router.get("/admin-users", response_model=List[AdminUserRead])
def list_admin_users(db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return AdminUseCases(db).list_admins()


@router.post("/admin-users", response_model=AdminUserRead, status_code=201)
def create_admin_user(payload: AdminUserCreate, db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    return AdminUseCases(db).create_admin(payload, created_by=current.id)


@router.patch("/admin-users/{user_id}", response_model=AdminUserRead)
def update_admin_user(user_id: int, payload: AdminUserUpdate,
                      db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    return AdminUseCases(db).update_admin(user_id, payload, updated_by=current.id)


@router.get("/audit", response_model=List[AuditLogRead])
def list_audit(entidade_tipo: str | None = Query(default=None, alias="entidadeTipo"),
               entidade_id: int | None = Query(default=None, alias="entidadeId"),
               limit: int = Query(default=200, ge=1, le=1000),
               db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return AdminUseCases(db).list_audit(entidade_tipo, entidade_id, limit)


@router.get("/stats", response_model=dict)
def stats(db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return AdminUseCases(db).stats()
