# valuation_controller.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.valuation_models import (
    ValuationCreate, ValuationRead, CalculateDcfRequest, CalculateMultiplesRequest,
)
from investme_api.domain.models.user_models import MessageResponse
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.valuation_use_cases import ValuationUseCases
from investme_api.application.use_cases.security import get_current_user

router = APIRouter(tags=["valuations"], dependencies=[swagger_bearer_auth()])


@router.get("/companies/{company_id}/valuations", response_model=List[ValuationRead])
def list_valuations(company_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).find_all(company_id, current)


@router.post("/companies/{company_id}/valuations", response_model=ValuationRead, status_code=201)
def create_valuation(company_id: int, payload: ValuationCreate,
                     db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).create(company_id, current, payload)


@router.get("/companies/{company_id}/valuations/latest", response_model=ValuationRead | None)
def latest_valuation(company_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).latest(company_id, current)


@router.get("/valuations/{valuation_id}", response_model=ValuationRead)
def get_valuation(valuation_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).get(valuation_id, current)


@router.delete("/valuations/{valuation_id}", response_model=MessageResponse)
def delete_valuation(valuation_id: int, db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    ValuationUseCases(db).delete(valuation_id, current)
    return MessageResponse(message="Valuation removido.")


@router.post("/valuations/{valuation_id}/calculate/dcf", response_model=ValuationRead)
def calculate_dcf(valuation_id: int, payload: CalculateDcfRequest,
                  db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).calculate(valuation_id, current, payload.dcf_data)


@router.post("/valuations/{valuation_id}/calculate/multiples", response_model=ValuationRead)
def calculate_multiples(valuation_id: int, payload: CalculateMultiplesRequest,
                        db: Session = Depends(get_db), current: UserEntity = Depends(get_current_user)):
    return ValuationUseCases(db).calculate(valuation_id, current, payload.multiples_data)
