# credit_request_controller.py
from typing import List, Literal
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.credit_request_models import (
    CreditRequestCreate, CreditRequestRead, CreditRequestAdminUpdate,
)
from investme_api.domain.entities.enums import RoleType, CreditRequestStatus
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.credit_request_use_cases import CreditRequestUseCases
from investme_api.application.use_cases.security import require_roles

router = APIRouter(tags=["credit-requests"], dependencies=[swagger_bearer_auth()])

entrepreneur_only = require_roles(RoleType.entrepreneur)
investor_only = require_roles(RoleType.investor)
admin_only = require_roles(RoleType.admin)


@router.get("/credit-requests", response_model=List[CreditRequestRead])
def list_credit_requests(db: Session = Depends(get_db), current: UserEntity = Depends(entrepreneur_only)):
    return CreditRequestUseCases(db).list_own(current.id)


@router.post("/credit-requests", response_model=CreditRequestRead, status_code=201)
def create_credit_request(payload: CreditRequestCreate,
                          db: Session = Depends(get_db), current: UserEntity = Depends(entrepreneur_only)):
    return CreditRequestUseCases(db).create(current, payload)


@router.get("/investor/credit-requests", response_model=List[CreditRequestRead])
def investor_credit_requests(scope: Literal["available", "mine"] = "available",
                             db: Session = Depends(get_db), current: UserEntity = Depends(investor_only)):
    return CreditRequestUseCases(db).list_for_investor(current, scope)


@router.post("/investor/credit-requests/{request_id}/accept", response_model=CreditRequestRead)
def accept_credit_request(request_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(investor_only)):
    return CreditRequestUseCases(db).accept(request_id, current)


@router.get("/admin/credit-requests", response_model=List[CreditRequestRead])
def admin_list_credit_requests(status: CreditRequestStatus | None = None,
                               db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return CreditRequestUseCases(db).admin_list(status)


@router.get("/admin/credit-requests/{request_id}", response_model=CreditRequestRead)
def admin_get_credit_request(request_id: int, db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return CreditRequestUseCases(db).admin_get(request_id)


@router.patch("/admin/credit-requests/{request_id}", response_model=CreditRequestRead)
def admin_update_credit_request(request_id: int, payload: CreditRequestAdminUpdate,
                                db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    return CreditRequestUseCases(db).admin_update(request_id, current.id, payload)
