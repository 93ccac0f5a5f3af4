import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.pop("SMTP_HOST", None)

import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from investme_api.main import app
from investme_api.infrastructure.database import Base, get_db
from investme_api.application.use_cases import auth_use_cases
from investme_api.application.use_cases.security import create_access_token, hash_password
from investme_api.application.utils.utils import _check_digit
from investme_api.domain.entities.company_entity import Company
from investme_api.domain.entities.enums import RoleType, RegistrationStatus, AdminProfile
from investme_api.domain.entities.user_entity import User, UserRole

PASSWORD = "senha-segura-123"

ALL_FLAGS = ("cadastro_aprovado", "email_confirmado", "documentos_verificados", "renda_comprovada", "perfil_investidor")

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

_sequence = itertools.count(1)


def make_cpf(seed: int) -> str:
    base = f"{(seed * 7919 + 100000000) % 1000000000:09d}"
    if base == base[0] * 9:
        base = "123456780"
    first = _check_digit(base, list(range(10, 1, -1)))
    second = _check_digit(base + str(first), list(range(11, 1, -1)))
    return f"{base}{first}{second}"


def make_cnpj(seed: int) -> str:
    base = f"{(seed * 104729 + 10000000) % 100000000:08d}0001"
    weights = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    first = _check_digit(base, weights)
    second = _check_digit(base + str(first), [6] + weights)
    return f"{base}{first}{second}"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    outbox = []

    def fake_send(to_email, subject, html_content):
        outbox.append({"to": to_email, "subject": subject, "html": html_content})
        return True

    monkeypatch.setattr(auth_use_cases, "send_email_html", fake_send)
    return outbox


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Cria um usuário com os perfis pedidos.

    ``roles`` mapeia perfil -> "approved" (todas as flags), "pending" (nenhuma)
    ou um dict de atributos do UserRole.
    """

    def _make(roles=None, email=None, is_active=True, **fields):
        n = next(_sequence)
        user = User(
            email=email or f"user{n}@example.com",
            cpf=fields.pop("cpf", make_cpf(n)),
            hashed_password=hash_password(PASSWORD),
            nome_completo=fields.pop("nome_completo", f"Usuário {n}"),
            is_active=is_active,
            **fields,
        )
        for role, state in (roles or {RoleType.entrepreneur: "approved"}).items():
            role = RoleType(role)
            if state == "approved":
                attrs = {flag: True for flag in ALL_FLAGS}
                attrs["status"] = RegistrationStatus.aprovada
            elif state == "pending":
                attrs = {flag: False for flag in ALL_FLAGS}
            else:
                attrs = {flag: False for flag in ALL_FLAGS}
                attrs.update(state)
            if role == RoleType.admin:
                attrs.setdefault("admin_perfil", AdminProfile.admin)
            user.roles.append(UserRole(role=role, **attrs))
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user({RoleType.admin: "approved"}, email="admin@investme.com.br")


def auth_headers(user, role=RoleType.entrepreneur) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email=user.email, role=RoleType(role))}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin, RoleType.admin)


@pytest.fixture
def make_company(db):
    def _make(owner, status=RegistrationStatus.aprovada, **fields):
        n = next(_sequence)
        company = Company(
            owner_id=owner.id,
            razao_social=fields.pop("razao_social", f"Empresa {n} LTDA"),
            cnpj=fields.pop("cnpj", make_cnpj(n)),
            cep="01310100",
            rua="Avenida Paulista",
            numero="1000",
            bairro="Bela Vista",
            cidade="São Paulo",
            estado="SP",
            cnae_principal="6201-5/01",
            cnae_secundarios=[],
            faturamento=1200000,
            ebitda=250000,
            divida_liquida=100000,
            images=[],
            status=status,
            **fields,
        )
        db.add(company)
        db.commit()
        db.refresh(company)
        return company

    return _make


def company_payload(cnpj: str, **overrides) -> dict:
    payload = {
        "razaoSocial": "Nova Empresa LTDA",
        "nomeFantasia": "Nova",
        "cnpj": cnpj,
        "cep": "01310-100",
        "rua": "Avenida Paulista",
        "numero": "1000",
        "bairro": "Bela Vista",
        "cidade": "São Paulo",
        "estado": "SP",
        "cnaePrincipal": "6201-5/01",
        "faturamento": 1500000,
        "ebitda": 300000,
        "dividaLiquida": 50000,
    }
    payload.update(overrides)
    return payload


# garante que todas as tabelas estejam registradas no metadata
from investme_api.domain.entities import (  # noqa: E402,F401
    audit_entity, company_entity, credit_request_entity, email_token_entity, message_entity,
    notification_entity, pending_change_entity, user_entity, valuation_entity,
)
