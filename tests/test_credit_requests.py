from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.enums import CreditRequestStatus, RegistrationStatus, RoleType

from conftest import auth_headers


def _payload(company_id, **overrides):
    payload = {"companyId": company_id, "valorSolicitado": 250000, "prazoMeses": 24, "finalidade": "Capital de giro"}
    payload.update(overrides)
    return payload


def _credit_request(db, company, **fields):
    credit_request = CreditRequest(
        company_id=company.id,
        valor_solicitado=fields.pop("valor_solicitado", 100000),
        prazo_meses=12,
        finalidade="Expansão",
        documentos=[],
        **fields,
    )
    db.add(credit_request)
    db.commit()
    db.refresh(credit_request)
    return credit_request


def test_create_for_approved_company(client, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner)

    resp = client.post("/api/credit-requests", json=_payload(company.id), headers=auth_headers(owner))
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "pendente"
    assert body["investorId"] is None
    assert body["companyRazaoSocial"] == company.razao_social

    listed = client.get("/api/credit-requests", headers=auth_headers(owner)).json()
    assert [r["id"] for r in listed] == [body["id"]]


def test_company_must_be_approved(client, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner, status=RegistrationStatus.pendente_analise)
    resp = client.post("/api/credit-requests", json=_payload(company.id), headers=auth_headers(owner))
    assert resp.status_code == 409


def test_entrepreneur_must_be_fully_approved(client, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: {"cadastro_aprovado": True}})
    company = make_company(owner)
    resp = client.post("/api/credit-requests", json=_payload(company.id), headers=auth_headers(owner))
    assert resp.status_code == 403


def test_cannot_request_for_someone_elses_company(client, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    intruder = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner)
    resp = client.post("/api/credit-requests", json=_payload(company.id), headers=auth_headers(intruder))
    assert resp.status_code == 404


def test_invalid_amount_and_term(client, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner)
    headers = auth_headers(owner)
    assert client.post("/api/credit-requests", json=_payload(company.id, valorSolicitado=0),
                       headers=headers).status_code == 422
    assert client.post("/api/credit-requests", json=_payload(company.id, prazoMeses=361),
                       headers=headers).status_code == 422


def test_investor_accepts_available_request_once(client, db, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    first = make_user({RoleType.investor: "approved"})
    second = make_user({RoleType.investor: "approved"})
    credit_request = _credit_request(db, make_company(owner))

    available = client.get("/api/investor/credit-requests", headers=auth_headers(first, RoleType.investor)).json()
    assert [r["id"] for r in available] == [credit_request.id]

    url = f"/api/investor/credit-requests/{credit_request.id}/accept"
    resp = client.post(url, headers=auth_headers(first, RoleType.investor))
    assert resp.status_code == 200
    assert resp.json()["status"] == "em_analise"
    assert resp.json()["investorId"] == first.id

    assert client.post(url, headers=auth_headers(second, RoleType.investor)).status_code == 409

    mine = client.get("/api/investor/credit-requests", params={"scope": "mine"},
                      headers=auth_headers(first, RoleType.investor)).json()
    assert [r["id"] for r in mine] == [credit_request.id]
    assert client.get("/api/investor/credit-requests", headers=auth_headers(second, RoleType.investor)).json() == []


def test_partially_approved_investor_cannot_accept(client, db, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    investor = make_user({RoleType.investor: {"cadastro_aprovado": True, "email_confirmado": True,
                                              "documentos_verificados": True}})
    credit_request = _credit_request(db, make_company(owner))
    headers = auth_headers(investor, RoleType.investor)

    assert client.get("/api/investor/credit-requests", headers=headers).status_code == 403
    assert client.post(f"/api/investor/credit-requests/{credit_request.id}/accept", headers=headers).status_code == 403


def test_admin_decides_credit_request(client, db, make_user, make_company, admin, admin_headers):
    owner = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner)
    approved = _credit_request(db, company)
    rejected = _credit_request(db, company, status=CreditRequestStatus.em_analise)

    resp = client.patch(f"/api/admin/credit-requests/{approved.id}", json={"status": "aprovada"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["analisadoPor"] == admin.id

    url = f"/api/admin/credit-requests/{rejected.id}"
    assert client.patch(url, json={"status": "reprovada"}, headers=admin_headers).status_code == 400
    resp = client.patch(url, json={"status": "reprovada", "observacoesAnalise": "Garantias insuficientes"},
                        headers=admin_headers)
    assert resp.json()["status"] == "reprovada"
    assert resp.json()["observacoesAnalise"] == "Garantias insuficientes"

    assert client.patch(url, json={"status": "aprovada"}, headers=admin_headers).status_code == 409
    pending = client.get("/api/admin/credit-requests", params={"status": "aprovada"}, headers=admin_headers).json()
    assert [r["id"] for r in pending] == [approved.id]
