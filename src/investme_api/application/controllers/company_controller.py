# company_controller.py
import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.company_models import (
    CompanyCreate, CompanyUpdate, CompanyRead, CompanyAdminRead, CompanyAdminUpdate, NetworkCompanyRead,
)
from investme_api.domain.entities.enums import RoleType, CompanyStatus
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.domain.exceptions import ConflictError, ValidationError
from investme_api.application.use_cases.company_use_cases import CompanyUseCases
from investme_api.application.use_cases.security import get_current_user, require_roles
from investme_api.application.utils.utils import dup_key_on, is_not_null_violation

router = APIRouter(tags=["companies"], dependencies=[swagger_bearer_auth()])

logger = logging.getLogger(__name__)

owner_only = require_roles(RoleType.entrepreneur, RoleType.investor)
admin_only = require_roles(RoleType.admin)


@router.get("/companies", response_model=List[CompanyRead])
def list_companies(db: Session = Depends(get_db), current: UserEntity = Depends(owner_only)):
    return CompanyUseCases(db).list_own(current.id)


@router.post("/companies", response_model=CompanyRead, status_code=201)
def create_company(payload: CompanyCreate, db: Session = Depends(get_db), current: UserEntity = Depends(owner_only)):
    try:
        return CompanyUseCases(db).create(current, payload)
    except IntegrityError as e:
        db.rollback()
        if dup_key_on(e, "cnpj"):
            raise ConflictError("CNPJ já cadastrado")
        logger.exception("Integrity error ao cadastrar empresa")
        raise ConflictError("Violação de integridade nos dados informados")


@router.get("/companies/{company_id}", response_model=CompanyRead)
def get_company(company_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return CompanyUseCases(db).get_for(company_id, current)


@router.api_route("/companies/{company_id}", methods=["PATCH", "PUT"], response_model=CompanyRead)
def update_company(company_id: int, payload: CompanyUpdate,
                   db: Session = Depends(get_db), current: UserEntity = Depends(owner_only)):
    try:
        return CompanyUseCases(db).update(company_id, current, payload)
    except IntegrityError as e:
        db.rollback()
        if is_not_null_violation(e):
            raise ValidationError("Campo obrigatório não pode ficar vazio")
        if dup_key_on(e, "cnpj"):
            raise ConflictError("CNPJ já cadastrado")
        logger.exception("Integrity error ao atualizar empresa %s", company_id)
        raise ConflictError("Violação de integridade nos dados informados")


@router.get("/network/companies", response_model=List[NetworkCompanyRead])
def network_companies(db: Session = Depends(get_db), current: UserEntity = Depends(require_roles(RoleType.investor))):
    return CompanyUseCases(db).list_network(current)


@router.get("/admin/companies", response_model=List[CompanyAdminRead])
def admin_list_companies(status: CompanyStatus | None = None,
                         db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return CompanyUseCases(db).admin_list(status)


@router.get("/admin/companies/{company_id}", response_model=CompanyAdminRead)
def admin_get_company(company_id: int, db: Session = Depends(get_db), _: UserEntity = Depends(admin_only)):
    return CompanyUseCases(db).admin_get(company_id)


@router.patch("/admin/companies/{company_id}", response_model=CompanyAdminRead)
def admin_update_company(company_id: int, payload: CompanyAdminUpdate,
                         db: Session = Depends(get_db), current: UserEntity = Depends(admin_only)):
    """
    Altera status e/ou observações internas.
    Corpo esperado: {"status": "aprovada"} ou {"status": "reprovada", "reason": "..."}
    """
    return CompanyUseCases(db).admin_update(company_id, current.id, payload)
