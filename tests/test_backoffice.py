from investme_api.cli import main as cli_main
from investme_api.domain.entities.credit_request_entity import CreditRequest
from investme_api.domain.entities.enums import CreditRequestStatus, RegistrationStatus, RoleType

from conftest import PASSWORD, TestingSessionLocal, auth_headers


def test_create_and_list_admins(client, admin, admin_headers):
    resp = client.post("/api/admin/admin-users",
                       json={"email": "Analista@Investme.com.br", "nomeCompleto": "Ana Analista",
                             "senha": "analista-123", "adminPerfil": "aprovacao_credito"},
                       headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["adminPerfil"] == "aprovacao_credito"

    emails = {a["email"] for a in client.get("/api/admin/admin-users", headers=admin_headers).json()}
    assert emails == {admin.email, "analista@investme.com.br"}

    login = client.post("/api/admin/auth/login", json={"email": "analista@investme.com.br", "senha": "analista-123"})
    assert login.status_code == 200

    audit = client.get("/api/admin/audit", params={"entidadeTipo": "admin"}, headers=admin_headers).json()
    assert [row["acao"] for row in audit] == ["admin_criado"]


def test_admin_email_must_be_unused(client, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"})
    resp = client.post("/api/admin/admin-users",
                       json={"email": user.email, "nomeCompleto": "Outro", "senha": "analista-123"},
                       headers=admin_headers)
    assert resp.status_code == 409


def test_update_admin_and_self_deactivation(client, admin, make_user, admin_headers):
    other = make_user({RoleType.admin: "approved"})

    resp = client.patch(f"/api/admin/admin-users/{other.id}", json={"isActive": False, "adminPerfil": "visualizacao"},
                        headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["isActive"] is False
    assert client.post("/api/admin/auth/login", json={"email": other.email, "senha": PASSWORD}).status_code == 401

    resp = client.patch(f"/api/admin/admin-users/{admin.id}", json={"isActive": False}, headers=admin_headers)
    assert resp.status_code == 400


def test_stats(client, db, make_user, make_company, admin_headers):
    make_user({RoleType.investor: "pending"})
    owner = make_user({RoleType.entrepreneur: "approved"})
    company = make_company(owner)
    make_company(owner, status=RegistrationStatus.pendente_analise)
    db.add_all([
        CreditRequest(company_id=company.id, valor_solicitado=1000, prazo_meses=12, finalidade="Giro", documentos=[]),
        CreditRequest(company_id=company.id, valor_solicitado=1000, prazo_meses=12, finalidade="Giro", documentos=[]),
    ])
    db.commit()
    client.put("/api/entrepreneur/profile", json={"cidade": "Recife"}, headers=auth_headers(owner))

    [first, _] = client.get("/api/admin/credit-requests", headers=admin_headers).json()
    client.patch(f"/api/admin/credit-requests/{first['id']}", json={"status": "aprovada"}, headers=admin_headers)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()
    assert stats["totalCompanies"] == 2
    assert stats["pendingCompanies"] == 1
    assert stats["pendingAnalysis"] == 1
    assert stats["monthlyApprovals"] == 1
    assert stats["monthlyVolume"] == 1000
    assert stats["pendingInvestors"] == 1
    assert stats["pendingEntrepreneurs"] == 0
    assert stats["pendingProfileChanges"] == 1


def test_cli_creates_first_admin(monkeypatch, db):
    monkeypatch.setattr("investme_api.infrastructure.database.SessionLocal", TestingSessionLocal)

    code = cli_main(["create-admin", "root@investme.com.br", "Administrador", "--senha", "root-senha-123"])
    assert code == 0
    assert cli_main(["create-admin", "root@investme.com.br", "Administrador", "--senha", "root-senha-123"]) == 1
    assert cli_main(["create-admin", "invalido", "Administrador", "--senha", "root-senha-123"]) == 2
