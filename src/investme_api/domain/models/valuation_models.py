from datetime import datetime
from pydantic import Field
from investme_api.domain.models.camel_model import CamelModel
from investme_api.domain.entities.enums import RoleType, ValuationMethod, ValuationStatus


class DcfData(CamelModel):
    projection_years: int = Field(ge=1, le=20)
    revenues: list[float]
    costs: list[float]
    operating_expenses: list[float]
    capex: list[float]
    working_capital_change: list[float]
    cost_of_equity: float = Field(ge=0)
    equity_weight: float = Field(ge=0, le=1)
    cost_of_debt: float = Field(ge=0)
    debt_weight: float = Field(ge=0, le=1)
    tax_rate: float = Field(ge=0, lt=1)
    terminal_growth_rate: float
    net_debt: float = 0.0


class MultiplesData(CamelModel):
    pe_multiple: float | None = None
    net_income: float | None = None
    ev_ebitda_multiple: float | None = None
    ebitda: float | None = None
    pv_vp_multiple: float | None = None
    book_value: float | None = None
    ev_revenue_multiple: float | None = None
    revenue: float | None = None
    liquidity_discount: float = Field(default=0.0, ge=0, lt=1)
    control_premium: float = Field(default=0.0, ge=0)


class ValuationCreate(CamelModel):
    method: ValuationMethod
    dcf_data: DcfData | None = None
    multiples_data: MultiplesData | None = None
    notes: str | None = None


class CalculateDcfRequest(CamelModel):
    dcf_data: DcfData


class CalculateMultiplesRequest(CamelModel):
    multiples_data: MultiplesData


class ValuationRead(CamelModel):
    id: int
    company_id: int
    user_id: int
    user_type: RoleType
    method: ValuationMethod
    status: ValuationStatus
    inputs: dict | None = None
    results: dict | None = None
    enterprise_value: float | None = None
    equity_value: float | None = None
    notes: str | None = None
    created_at: datetime
