from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from investme_api.application.utils.utils import is_not_null_violation
from investme_api.domain.entities.audit_entity import AuditLog
from investme_api.domain.entities.enums import RoleType, ChangeStatus
from investme_api.domain.entities.pending_change_entity import PendingProfileChange
from investme_api.domain.entities.user_entity import User

from conftest import PASSWORD, auth_headers


def test_submit_does_not_touch_profile(client, db, make_user):
    user = make_user({RoleType.entrepreneur: "approved"}, telefone="1133334444")
    headers = auth_headers(user)

    resp = client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"}, headers=headers)
    assert resp.status_code == 202
    assert resp.json()["id"] > 0

    db.expire_all()
    assert db.get(User, user.id).telefone == "1133334444"

    pending = client.get("/api/entrepreneur/pending-profile-changes", headers=headers).json()
    assert pending["status"] == "pending"
    assert pending["changedFields"] == {"telefone": "11999999999"}


def test_second_submission_conflicts_while_pending(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    headers = auth_headers(user)

    assert client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"}, headers=headers).status_code == 202
    resp = client.put("/api/entrepreneur/profile", json={"cidade": "Campinas"}, headers=headers)
    assert resp.status_code == 409


def test_pending_change_blocks_other_role_of_same_user(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved", RoleType.investor: "approved"})

    assert client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"},
                      headers=auth_headers(user)).status_code == 202
    resp = client.put("/api/investor/profile", json={"cidade": "Campinas"},
                      headers=auth_headers(user, RoleType.investor))
    assert resp.status_code == 409


def test_unknown_or_forbidden_fields_are_rejected(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    headers = auth_headers(user)

    assert client.put("/api/entrepreneur/profile", json={"cpf": "00000000000"}, headers=headers).status_code == 400
    # limite de investimento só existe para investidores
    resp = client.put("/api/entrepreneur/profile", json={"limiteInvestimento": "100000"}, headers=headers)
    assert resp.status_code == 400
    assert client.put("/api/entrepreneur/profile", json={}, headers=headers).status_code == 400


def test_snake_case_keys_are_normalized(client, make_user):
    user = make_user({RoleType.investor: "approved"})
    headers = auth_headers(user, RoleType.investor)

    resp = client.put("/api/investor/profile", json={"limite_investimento": "250000"}, headers=headers)
    assert resp.status_code == 202
    pending = client.get("/api/investor/pending-profile-changes", headers=headers).json()
    assert pending["changedFields"] == {"limiteInvestimento": "250000"}


def test_approval_applies_fields_and_is_audited(client, db, make_user, admin, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"})
    change_id = client.put("/api/entrepreneur/profile",
                           json={"telefone": "11999999999", "cidade": "Campinas"},
                           headers=auth_headers(user)).json()["id"]

    resp = client.post(f"/api/admin/pending-profile-changes/{change_id}/review",
                       json={"approved": True, "comment": "ok"}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "approved"
    assert body["reviewedBy"] == admin.id
    assert body["reviewComment"] == "ok"

    db.expire_all()
    refreshed = db.get(User, user.id)
    assert refreshed.telefone == "11999999999"
    assert refreshed.cidade == "Campinas"

    audit = db.query(AuditLog).filter(AuditLog.entidade_tipo == "pending_profile_change").one()
    assert audit.acao == "profile_change_approved"
    assert audit.admin_user_id == admin.id


def test_rejection_keeps_profile_and_frees_slot(client, db, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"}, telefone="1133334444")
    headers = auth_headers(user)
    change_id = client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"}, headers=headers).json()["id"]

    resp = client.post(f"/api/admin/pending-profile-changes/{change_id}/review",
                       json={"approved": False, "comment": "Telefone não confere"}, headers=admin_headers)
    assert resp.json()["status"] == "rejected"

    db.expire_all()
    assert db.get(User, user.id).telefone == "1133334444"
    assert client.get("/api/entrepreneur/pending-profile-changes", headers=headers).json() is None
    assert client.put("/api/entrepreneur/profile", json={"telefone": "11888888888"}, headers=headers).status_code == 202


def test_second_review_is_rejected(client, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"})
    change_id = client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"},
                           headers=auth_headers(user)).json()["id"]
    url = f"/api/admin/pending-profile-changes/{change_id}/review"

    assert client.post(url, json={"approved": True, "comment": "ok"}, headers=admin_headers).status_code == 200
    resp = client.post(url, json={"approved": False, "comment": "tarde demais"}, headers=admin_headers)
    assert resp.status_code == 409


def test_review_unknown_change(client, admin_headers):
    resp = client.post("/api/admin/pending-profile-changes/999/review", json={"approved": True}, headers=admin_headers)
    assert resp.status_code == 404


def test_email_change_colliding_with_other_user(client, make_user, admin_headers):
    make_user({RoleType.investor: "approved"}, email="ocupado@example.com")
    user = make_user({RoleType.entrepreneur: "approved"})
    change_id = client.put("/api/entrepreneur/profile", json={"email": "Ocupado@Example.com"},
                           headers=auth_headers(user)).json()["id"]

    resp = client.post(f"/api/admin/pending-profile-changes/{change_id}/review",
                       json={"approved": True}, headers=admin_headers)
    assert resp.status_code == 409


def test_admin_lists_changes_with_owner(client, make_user, admin_headers):
    user = make_user({RoleType.investor: "approved"}, nome_completo="Maria Investidora")
    client.put("/api/investor/profile", json={"cidade": "Recife"}, headers=auth_headers(user, RoleType.investor))

    resp = client.get("/api/admin/pending-profile-changes", params={"status": "pending", "userType": "investor"},
                      headers=admin_headers)
    assert resp.status_code == 200
    [item] = resp.json()
    assert item["user"]["nomeCompleto"] == "Maria Investidora"

    assert client.get("/api/admin/pending-profile-changes", params={"userType": "entrepreneur"},
                      headers=admin_headers).json() == []


def test_profile_routes_require_matching_role(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    resp = client.put("/api/investor/profile", json={"cidade": "Recife"}, headers=auth_headers(user))
    assert resp.status_code == 403
    assert client.get("/api/entrepreneur/profile").status_code == 401


def test_approved_email_change_touches_only_email(client, db, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"}, telefone="1133334444", cidade="Santos")
    change_id = client.put("/api/entrepreneur/profile", json={"email": "x@y.com"},
                           headers=auth_headers(user)).json()["id"]

    client.post(f"/api/admin/pending-profile-changes/{change_id}/review", json={"approved": True},
                headers=admin_headers)

    db.expire_all()
    refreshed = db.get(User, user.id)
    assert refreshed.email == "x@y.com"
    assert (refreshed.telefone, refreshed.cidade, refreshed.nome_completo) == ("1133334444", "Santos", user.nome_completo)


@pytest.mark.parametrize("payload", [
    {"nomeCompleto": None},
    {"nomeCompleto": "   "},
    {"email": None},
    {"email": ""},
])
def test_required_profile_fields_cannot_be_cleared(client, make_user, payload):
    user = make_user({RoleType.entrepreneur: "approved"})
    headers = auth_headers(user)

    resp = client.put("/api/entrepreneur/profile", json=payload, headers=headers)
    assert resp.status_code == 400
    assert client.get("/api/entrepreneur/pending-profile-changes", headers=headers).json() is None


def test_optional_profile_fields_can_be_cleared(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"}, telefone="1133334444")

    resp = client.put("/api/entrepreneur/profile", json={"telefone": None}, headers=auth_headers(user))
    assert resp.status_code == 202


def test_stored_change_clearing_required_field_is_not_applied(client, db, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"}, nome_completo="João Empreendedor")
    change = PendingProfileChange(
        user_id=user.id,
        user_type=RoleType.entrepreneur,
        changed_fields={"nomeCompleto": None},
        requested_at=datetime.now(timezone.utc),
    )
    db.add(change)
    db.commit()

    resp = client.post(f"/api/admin/pending-profile-changes/{change.id}/review",
                       json={"approved": True}, headers=admin_headers)
    assert resp.status_code == 400

    db.expire_all()
    assert db.get(User, user.id).nome_completo == "João Empreendedor"
    assert db.get(PendingProfileChange, change.id).status == ChangeStatus.pending
    # ainda pode ser reprovada
    resp = client.post(f"/api/admin/pending-profile-changes/{change.id}/review",
                       json={"approved": False}, headers=admin_headers)
    assert resp.json()["status"] == "rejected"


def test_not_null_violation_detection():
    sqlite_err = IntegrityError("UPDATE users", {}, Exception("NOT NULL constraint failed: users.email"))
    pg_err = IntegrityError("UPDATE users", {}, Exception('null value in column "email" violates not-null constraint'))
    unique_err = IntegrityError("UPDATE users", {}, Exception("UNIQUE constraint failed: users.email"))

    assert is_not_null_violation(sqlite_err)
    assert is_not_null_violation(pg_err)
    assert not is_not_null_violation(unique_err)


def test_approved_email_change_requires_new_login(client, make_user, admin_headers):
    user = make_user({RoleType.entrepreneur: "approved"})
    headers = auth_headers(user)

    resp = client.put("/api/entrepreneur/profile", json={"email": "novo@investme.com.br"}, headers=headers)
    assert "entrar novamente" in resp.json()["message"]
    client.post(f"/api/admin/pending-profile-changes/{resp.json()['id']}/review",
                json={"approved": True}, headers=admin_headers)

    assert client.get("/api/auth/me", headers=headers).status_code == 401

    login = client.post("/api/auth/login", json={"login": "novo@investme.com.br", "senha": PASSWORD})
    assert login.status_code == 200
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login.json()['accessToken']}"})
    assert me.json()["id"] == user.id


def test_submit_message_without_email_change(client, make_user):
    user = make_user({RoleType.entrepreneur: "approved"})
    resp = client.put("/api/entrepreneur/profile", json={"telefone": "11999999999"}, headers=auth_headers(user))
    assert "entrar novamente" not in resp.json()["message"]
