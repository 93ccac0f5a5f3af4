import pytest

from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.enums import CreditRequestStatus, RoleType

from conftest import auth_headers


@pytest.fixture
def deal(db, make_user, make_company):
    owner = make_user({RoleType.entrepreneur: "approved"})
    investor = make_user({RoleType.investor: "approved"})
    company = make_company(owner, razao_social="Padaria Central LTDA")
    credit_request = CreditRequest(
        company_id=company.id,
        valor_solicitado=80000,
        prazo_meses=18,
        finalidade="Novo forno",
        documentos=[],
        status=CreditRequestStatus.em_analise,
        investor_id=investor.id,
    )
    db.add(credit_request)
    db.commit()
    db.refresh(credit_request)
    return {
        "owner": owner,
        "investor": investor,
        "company": company,
        "credit_request": credit_request,
        "owner_headers": auth_headers(owner),
        "investor_headers": auth_headers(investor, RoleType.investor),
    }


def test_investor_starts_conversation_with_company(client, deal):
    cr = deal["credit_request"]
    resp = client.post("/api/messages", json={"creditRequestId": cr.id, "conteudo": "Podem enviar o balanço?"},
                       headers=deal["investor_headers"])
    assert resp.status_code == 201
    body = resp.json()
    assert body["remetenteTipo"] == "investor"
    assert body["destinatarioTipo"] == "company"
    assert body["conversationId"].startswith(f"{deal['company'].id}_{cr.id}_")
    assert body["assunto"] == f"Solicitação de crédito #{cr.id}"

    [summary] = client.get("/api/messages/conversations", headers=deal["owner_headers"]).json()
    assert summary["conversationId"] == body["conversationId"]
    assert summary["companyName"] == "Padaria Central LTDA"
    assert summary["unreadCount"] == 1
    assert summary["lastMessage"] == "Podem enviar o balanço?"


def test_reply_keeps_subject_and_mark_read(client, deal):
    cr = deal["credit_request"]
    first = client.post("/api/messages", json={"creditRequestId": cr.id, "assunto": "Balanço 2023",
                                               "conteudo": "Podem enviar o balanço?"},
                        headers=deal["investor_headers"]).json()
    conversation_id = first["conversationId"]

    reply = client.post("/api/messages", json={"conversationId": conversation_id, "creditRequestId": cr.id,
                                               "conteudo": "Segue em anexo.", "destinatarioTipo": "investor",
                                               "anexos": ["https://cdn.example.com/balanco.pdf"]},
                        headers=deal["owner_headers"]).json()
    assert reply["assunto"] == "Balanço 2023"
    assert reply["conversationId"] == conversation_id

    resp = client.patch(f"/api/messages/{conversation_id}/read", headers=deal["owner_headers"])
    assert resp.status_code == 200
    thread = client.get(f"/api/messages/{conversation_id}", headers=deal["owner_headers"]).json()
    assert [m["lida"] for m in thread] == [True, False]

    [summary] = client.get("/api/messages/conversations", headers=deal["investor_headers"]).json()
    assert summary["unreadCount"] == 1
    assert summary["lastMessage"] == "Segue em anexo."


def test_company_messages_default_to_backoffice(client, deal, admin_headers):
    cr = deal["credit_request"]
    body = client.post("/api/messages", json={"creditRequestId": cr.id, "conteudo": "Qual o prazo de análise?"},
                       headers=deal["owner_headers"]).json()
    assert body["destinatarioTipo"] == "admin"

    # conversa entre empresa e back-office não aparece para o investidor
    assert client.get("/api/messages/conversations", headers=deal["investor_headers"]).json() == []
    [summary] = client.get("/api/admin/messages/conversations", headers=admin_headers).json()
    assert summary["unreadCount"] == 1


def test_cannot_message_yourself(client, deal):
    resp = client.post("/api/messages", json={"creditRequestId": deal["credit_request"].id, "conteudo": "Oi",
                                              "destinatarioTipo": "company"},
                       headers=deal["owner_headers"])
    assert resp.status_code == 400


def test_outsiders_cannot_access(client, deal, make_user):
    stranger = make_user({RoleType.investor: "approved"})
    headers = auth_headers(stranger, RoleType.investor)
    cr = deal["credit_request"]
    assert client.post("/api/messages", json={"creditRequestId": cr.id, "conteudo": "Oi"},
                       headers=headers).status_code == 403

    conversation_id = client.post("/api/messages", json={"creditRequestId": cr.id, "conteudo": "Oi"},
                                  headers=deal["investor_headers"]).json()["conversationId"]
    assert client.get(f"/api/messages/{conversation_id}", headers=headers).status_code == 403
    assert client.get("/api/messages/unknown_conversation", headers=headers).status_code == 404


def test_conversation_is_anchored_to_its_credit_request(client, db, deal):
    cr = deal["credit_request"]
    other = CreditRequest(company_id=deal["company"].id, valor_solicitado=1000, prazo_meses=6,
                          finalidade="Outra", documentos=[], investor_id=deal["investor"].id,
                          status=CreditRequestStatus.em_analise)
    db.add(other)
    db.commit()
    conversation_id = client.post("/api/messages", json={"creditRequestId": cr.id, "conteudo": "Oi"},
                                  headers=deal["investor_headers"]).json()["conversationId"]

    resp = client.post("/api/messages", json={"conversationId": conversation_id, "creditRequestId": other.id,
                                              "conteudo": "Mudando de assunto"},
                       headers=deal["investor_headers"])
    assert resp.status_code == 409

    resp = client.post("/api/messages", json={"conversationId": "forjado", "creditRequestId": cr.id,
                                              "conteudo": "Oi"},
                       headers=deal["investor_headers"])
    assert resp.status_code == 400
