import pytest

from investme_api.domain.entities.enums import RegistrationStatus, RoleType

from conftest import auth_headers

DCF = {
    "projectionYears": 2,
    "revenues": [1000.0, 1100.0],
    "costs": [400.0, 440.0],
    "operatingExpenses": [200.0, 220.0],
    "capex": [50.0, 50.0],
    "workingCapitalChange": [10.0, 10.0],
    "costOfEquity": 0.15,
    "equityWeight": 0.6,
    "costOfDebt": 0.10,
    "debtWeight": 0.4,
    "taxRate": 0.25,
    "terminalGrowthRate": 0.03,
    "netDebt": 100.0,
}

MULTIPLES = {"peMultiple": 10, "netIncome": 100, "evEbitdaMultiple": 6, "ebitda": 200}


@pytest.fixture
def owner(make_user):
    return make_user({RoleType.entrepreneur: "approved"})


@pytest.fixture
def company(owner, make_company):
    return make_company(owner)


def test_owner_creates_draft_then_calculates(client, owner, company):
    headers = auth_headers(owner)
    draft = client.post(f"/api/companies/{company.id}/valuations", json={"method": "dcf", "notes": "Cenário base"},
                        headers=headers)
    assert draft.status_code == 201
    assert draft.json()["status"] == "draft"
    assert client.get(f"/api/companies/{company.id}/valuations/latest", headers=headers).json() is None

    resp = client.post(f"/api/valuations/{draft.json()['id']}/calculate/dcf", json={"dcfData": DCF}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["inputs"]["projectionYears"] == 2
    assert body["results"]["freeCashFlows"] == pytest.approx([240.0, 270.0])
    assert body["equityValue"] == pytest.approx(body["enterpriseValue"] - 100.0, abs=0.01)

    latest = client.get(f"/api/companies/{company.id}/valuations/latest", headers=headers).json()
    assert latest["id"] == body["id"]
    assert client.get(f"/api/companies/{company.id}", headers=headers).json()["valuation"] == pytest.approx(
        body["equityValue"])


def test_create_with_multiples_computes_immediately(client, owner, company):
    resp = client.post(f"/api/companies/{company.id}/valuations",
                       json={"method": "multiples", "multiplesData": MULTIPLES}, headers=auth_headers(owner))
    body = resp.json()
    assert body["status"] == "completed"
    assert body["results"]["averageValuation"] == pytest.approx(1100)
    assert body["enterpriseValue"] == pytest.approx(1100)


def test_method_mismatch_conflicts(client, owner, company):
    headers = auth_headers(owner)
    valuation_id = client.post(f"/api/companies/{company.id}/valuations", json={"method": "dcf"},
                               headers=headers).json()["id"]
    resp = client.post(f"/api/valuations/{valuation_id}/calculate/multiples", json={"multiplesData": MULTIPLES},
                       headers=headers)
    assert resp.status_code == 409


def test_invalid_growth_is_rejected(client, owner, company):
    headers = auth_headers(owner)
    valuation_id = client.post(f"/api/companies/{company.id}/valuations", json={"method": "dcf"},
                               headers=headers).json()["id"]
    resp = client.post(f"/api/valuations/{valuation_id}/calculate/dcf",
                       json={"dcfData": {**DCF, "terminalGrowthRate": 0.5}}, headers=headers)
    assert resp.status_code == 400


def test_investor_access_rules(client, make_user, make_company, owner, company):
    investor = make_user({RoleType.investor: "approved"})
    pending_investor = make_user({RoleType.investor: {"cadastro_aprovado": True}})
    hidden = make_company(owner, status=RegistrationStatus.em_analise)
    headers = auth_headers(investor, RoleType.investor)

    resp = client.post(f"/api/companies/{company.id}/valuations", json={"method": "multiples",
                                                                       "multiplesData": MULTIPLES}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["userType"] == "investor"

    assert client.post(f"/api/companies/{company.id}/valuations", json={"method": "dcf"},
                       headers=auth_headers(pending_investor, RoleType.investor)).status_code == 403
    assert client.post(f"/api/companies/{hidden.id}/valuations", json={"method": "dcf"},
                       headers=headers).status_code == 403
    assert client.get(f"/api/companies/{hidden.id}/valuations", headers=headers).status_code == 404


def test_only_author_deletes(client, make_user, owner, company, admin_headers):
    investor = make_user({RoleType.investor: "approved"})
    valuation_id = client.post(f"/api/companies/{company.id}/valuations", json={"method": "dcf"},
                               headers=auth_headers(owner)).json()["id"]

    assert client.get(f"/api/valuations/{valuation_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/valuations/{valuation_id}",
                         headers=auth_headers(investor, RoleType.investor)).status_code == 403
    assert client.delete(f"/api/valuations/{valuation_id}", headers=auth_headers(owner)).status_code == 200
    assert client.get(f"/api/valuations/{valuation_id}", headers=auth_headers(owner)).status_code == 404
