import smtplib

from investme_api.application.use_cases import auth_use_cases
from investme_api.application.use_cases.security import create_access_token
from investme_api.domain.entities.email_token_entity import EmailConfirmationToken
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.entities.user_entity import User

from conftest import PASSWORD, auth_headers, make_cpf


def _register_payload(cpf, **overrides):
    payload = {
        "email": "Joana@Example.com",
        "cpf": cpf,
        "nomeCompleto": "Joana Silva",
        "senha": PASSWORD,
        "confirmarSenha": PASSWORD,
        "telefone": "11988887777",
        "cep": "01310-100",
        "estado": "sp",
    }
    payload.update(overrides)
    return payload


def test_register_entrepreneur_sends_confirmation(client, db, sent_emails):
    resp = client.post("/api/entrepreneurs/register", json=_register_payload(make_cpf(501)))
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "joana@example.com"
    assert body["cep"] == "01310100"
    assert body["estado"] == "SP"
    [approval] = body["approvals"]
    assert approval["role"] == "entrepreneur"
    assert approval["status"] == "pendente_analise"
    assert approval["fullyApproved"] is False

    [email] = sent_emails
    assert email["to"] == "joana@example.com"
    token = db.query(EmailConfirmationToken).one()
    assert token.token in email["html"]


def test_register_rejects_bad_cpf_and_mismatched_passwords(client):
    assert client.post("/api/entrepreneurs/register", json=_register_payload("12345678900")).status_code == 422
    resp = client.post("/api/entrepreneurs/register", json=_register_payload(make_cpf(502), confirmarSenha="outra-senha"))
    assert resp.status_code == 422


def test_same_email_adds_second_role_with_correct_password(client, db):
    cpf = make_cpf(503)
    assert client.post("/api/auth/register", json=_register_payload(cpf)).status_code == 201

    wrong = _register_payload(cpf, senha="senha-errada-1", confirmarSenha=None, tipo="investor")
    assert client.post("/api/auth/register", json=wrong).status_code == 409

    resp = client.post("/api/investors/register", json=_register_payload(cpf, limiteInvestimento="500000"))
    assert resp.status_code == 201
    assert sorted(a["role"] for a in resp.json()["approvals"]) == ["entrepreneur", "investor"]
    assert db.query(User).count() == 1

    # mesmo perfil duas vezes
    assert client.post("/api/investors/register", json=_register_payload(cpf)).status_code == 409


def test_cpf_of_another_account_conflicts(client):
    cpf = make_cpf(504)
    assert client.post("/api/entrepreneurs/register", json=_register_payload(cpf)).status_code == 201
    resp = client.post("/api/entrepreneurs/register", json=_register_payload(cpf, email="outra@example.com"))
    assert resp.status_code == 409


def test_admin_email_cannot_take_platform_roles(client, admin):
    resp = client.post("/api/entrepreneurs/register",
                       json=_register_payload(make_cpf(505), email=admin.email))
    assert resp.status_code == 409


def test_admin_type_is_not_self_service(client):
    resp = client.post("/api/auth/register", json=_register_payload(make_cpf(506), tipo="admin"))
    assert resp.status_code == 422


def test_email_failure_does_not_break_registration(client, monkeypatch):
    def broken(**kwargs):
        raise smtplib.SMTPException("servidor indisponível")

    monkeypatch.setattr(auth_use_cases, "send_email_html", broken)
    assert client.post("/api/entrepreneurs/register", json=_register_payload(make_cpf(507))).status_code == 201


def test_login_by_email_or_cpf(client, make_user):
    user = make_user({RoleType.investor: "pending", RoleType.entrepreneur: "pending"})

    resp = client.post("/api/auth/login", json={"login": user.email.upper(), "senha": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["role"] == "entrepreneur"
    assert resp.json()["tokenType"] == "bearer"

    resp = client.post("/api/investors/login", json={"login": user.cpf, "senha": PASSWORD})
    assert resp.json()["role"] == "investor"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {resp.json()['accessToken']}"}).json()
    assert me["sessionRole"] == "investor"
    assert me["id"] == user.id


def test_login_failures(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    assert client.post("/api/auth/login", json={"login": user.email, "senha": "errada"}).status_code == 401
    assert client.post("/api/investors/login", json={"login": user.email, "senha": PASSWORD}).status_code == 403
    assert client.post("/api/admin/auth/login", json={"email": user.email, "senha": PASSWORD}).status_code == 403

    inactive = make_user({RoleType.entrepreneur: "approved"}, is_active=False)
    assert client.post("/api/auth/login", json={"login": inactive.email, "senha": PASSWORD}).status_code == 401


def test_admin_login(client, admin):
    resp = client.post("/api/admin/auth/login", json={"email": admin.email, "senha": PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"


def test_token_for_role_no_longer_held(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    assert client.get("/api/auth/me", headers=auth_headers(user, RoleType.investor)).status_code == 403
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer lixo"}).status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_confirm_email_sets_flag_once(client, db, sent_emails):
    client.post("/api/entrepreneurs/register", json=_register_payload(make_cpf(508)))
    token = db.query(EmailConfirmationToken).one().token

    assert client.post("/api/email-confirmation/confirm", json={"token": token}).status_code == 200
    assert client.post("/api/email-confirmation/confirm", json={"token": token}).status_code == 400

    db.expire_all()
    user = db.query(User).one()
    assert user.get_role(RoleType.entrepreneur).email_confirmado is True


def test_request_email_confirmation_replaces_token(client, db, sent_emails):
    client.post("/api/entrepreneurs/register", json=_register_payload(make_cpf(509)))
    old = db.query(EmailConfirmationToken).one().token

    resp = client.post("/api/email-confirmation/request",
                       json={"email": "joana@example.com", "userType": "entrepreneur"})
    assert resp.status_code == 200
    assert len(sent_emails) == 2
    assert client.post("/api/email-confirmation/confirm", json={"token": old}).status_code == 400

    # e-mail desconhecido recebe a mesma resposta
    resp = client.post("/api/email-confirmation/request", json={"email": "ninguem@example.com", "userType": "investor"})
    assert resp.status_code == 200
    assert len(sent_emails) == 2


def test_password_reset_flow(client, make_user, sent_emails):
    user = make_user({RoleType.entrepreneur: "approved"})
    resp = client.post("/api/password-reset/request", json={"email": user.email})
    assert resp.status_code == 200
    assert len(sent_emails) == 1

    token = create_access_token(email=user.email, role=RoleType.entrepreneur, expires_minutes=15, purpose="reset")
    assert client.post("/api/password-reset/confirm", json={"token": token, "novaSenha": "nova-senha-123"}).status_code == 200
    assert client.post("/api/auth/login", json={"login": user.email, "senha": "nova-senha-123"}).status_code == 200

    # token de acesso comum não serve para redefinir senha
    access = create_access_token(email=user.email, role=RoleType.entrepreneur)
    assert client.post("/api/password-reset/confirm", json={"token": access, "novaSenha": "x" * 10}).status_code == 400


def test_unknown_email_reset_is_silent(client, sent_emails):
    resp = client.post("/api/password-reset/request", json={"email": "ninguem@example.com"})
    assert resp.status_code == 200
    assert sent_emails == []


def test_change_password(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    headers = auth_headers(user)
    resp = client.put("/api/auth/change-password", json={"senhaAtual": "errada", "novaSenha": "nova-senha-123"},
                      headers=headers)
    assert resp.status_code == 400
    resp = client.put("/api/auth/change-password", json={"senhaAtual": PASSWORD, "novaSenha": "nova-senha-123"},
                      headers=headers)
    assert resp.status_code == 200


def test_status_catalog_and_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    catalog = client.get("/api/meta/statuses").json()
    assert {"value": "pendente", "label": "Pendente", "variant": "secondary"} in catalog["credit_request"]


def test_confirmation_email_escapes_user_name(client, sent_emails):
    payload = _register_payload(make_cpf(502), nomeCompleto='<b onclick="x()">Joana</b>')
    assert client.post("/api/entrepreneurs/register", json=payload).status_code == 201

    [email] = sent_emails
    assert "<b onclick" not in email["html"]
    assert "&lt;b onclick=&quot;x()&quot;&gt;Joana&lt;/b&gt;" in email["html"]


def test_reset_email_escapes_user_name(client, make_user, sent_emails):
    user = make_user({RoleType.entrepreneur: "approved"}, nome_completo="Ana & <i>Filhos</i>")
    client.post("/api/password-reset/request", json={"email": user.email})

    [email] = sent_emails
    assert "Ana &amp; &lt;i&gt;Filhos&lt;/i&gt;" in email["html"]
