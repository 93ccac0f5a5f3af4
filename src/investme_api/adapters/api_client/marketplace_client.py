"""Cliente HTTP da API com sessão explícita.

A sessão (URL base, token e perfil ativo) é um objeto passado ao cliente, não
um estado global. Toda resposta 401 passa pelo mesmo callback
``on_unauthorized`` antes de virar ``AuthError``.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from investme_api.domain.entities.enums import RoleType
from investme_api.domain.exceptions import (
    AuthError, ConflictError, DomainError, NetworkError, NotFoundError, PermissionDenied, ValidationError,
)

logger = logging.getLogger(__name__)

# contadores e listas de conversas
NOTIFICATION_POLL_SECONDS = 30
# conversa aberta
MESSAGE_POLL_SECONDS = 5

PROFILE_PATHS = {
    RoleType.entrepreneur: "/api/entrepreneur/profile",
    RoleType.investor: "/api/investor/profile",
    RoleType.admin: "/api/auth/me",
}

_STATUS_ERRORS = {
    400: ValidationError,
    403: PermissionDenied,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


@dataclass
class ApiSession:
    base_url: str
    token: str | None = None
    role: RoleType | None = None

    def clear(self) -> None:
        self.token = None
        self.role = None


def _detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list) and detail:
        # erros de validação do FastAPI
        first = detail[0]
        return first.get("msg") if isinstance(first, dict) else str(first)
    return detail if isinstance(detail, str) else None


class MarketplaceClient:
    def __init__(
        self,
        session: ApiSession,
        http: httpx.Client | None = None,
        on_unauthorized: Callable[[ApiSession], None] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.session = session
        self.http = http or httpx.Client(base_url=session.base_url.rstrip("/"), timeout=timeout)
        self.on_unauthorized = on_unauthorized or ApiSession.clear

    # ------------------------------------------------------------------ HTTP --
    def _headers(self) -> dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    def request(self, method: str, path: str, *, json: Any = None, params: dict | None = None) -> Any:
        try:
            response = self.http.request(method, path, json=json, params=params, headers=self._headers())
        except httpx.TransportError as exc:
            logger.warning("Falha de rede em %s %s: %s", method, path, exc)
            raise NetworkError() from exc

        if response.status_code == 401:
            self.on_unauthorized(self.session)
            raise AuthError(_detail(response))
        if response.status_code >= 400:
            error = _STATUS_ERRORS.get(response.status_code, DomainError)
            raise error(_detail(response))
        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------ auth --
    def login(self, login: str, senha: str, role: RoleType | None = None) -> dict:
        if role == RoleType.admin:
            data = self.request("POST", "/api/admin/auth/login", json={"email": login, "senha": senha})
        else:
            body = {"login": login, "senha": senha, "role": RoleType(role).value if role else None}
            data = self.request("POST", "/api/auth/login", json=body)
        self.session.token = data["accessToken"]
        self.session.role = RoleType(data["role"])
        return data

    def logout(self) -> None:
        self.session.clear()

    def me(self) -> dict:
        return self.request("GET", "/api/auth/me")

    # --------------------------------------------------------------- profile --
    def _profile_path(self) -> str:
        if self.session.role is None:
            raise AuthError("Sessão sem perfil ativo")
        return PROFILE_PATHS[RoleType(self.session.role)]

    def profile(self) -> dict:
        return self.request("GET", self._profile_path())

    def submit_profile_change(self, changed_fields: dict) -> dict:
        if self.session.role not in (RoleType.entrepreneur, RoleType.investor):
            raise AuthError("Perfil não permite alteração de cadastro")
        return self.request("PUT", self._profile_path(), json=changed_fields)

    def pending_profile_change(self) -> dict | None:
        if self.session.role not in (RoleType.entrepreneur, RoleType.investor):
            return None
        return self.request("GET", f"/api/{RoleType(self.session.role).value}/pending-profile-changes")

    # ------------------------------------------------- companies and credit --
    def companies(self) -> list[dict]:
        return self.request("GET", "/api/companies")

    def create_company(self, data: dict) -> dict:
        return self.request("POST", "/api/companies", json=data)

    def credit_requests(self) -> list[dict]:
        return self.request("GET", "/api/credit-requests")

    def create_credit_request(self, data: dict) -> dict:
        return self.request("POST", "/api/credit-requests", json=data)

    # ---------------------------------------------------------- notifications --
    def notifications(self) -> list[dict]:
        return self.request("GET", "/api/notifications")

    def unread_count(self) -> int:
        return self.request("GET", "/api/notifications/unread/count")["count"]

    def mark_notification_read(self, notification_id: int) -> None:
        self.request("POST", f"/api/notifications/{notification_id}/read")

    # --------------------------------------------------------------- messages --
    def _messages_prefix(self) -> str:
        return "/api/admin/messages" if self.session.role == RoleType.admin else "/api/messages"

    def conversations(self) -> list[dict]:
        return self.request("GET", f"{self._messages_prefix()}/conversations")

    def conversation(self, conversation_id: str) -> list[dict]:
        return self.request("GET", f"{self._messages_prefix()}/{conversation_id}")

    def send_message(self, credit_request_id: int, conteudo: str, conversation_id: str | None = None, **extra) -> dict:
        body = {"creditRequestId": credit_request_id, "conteudo": conteudo, "conversationId": conversation_id, **extra}
        return self.request("POST", self._messages_prefix(), json=body)

    def mark_conversation_read(self, conversation_id: str) -> None:
        self.request("PATCH", f"{self._messages_prefix()}/{conversation_id}/read")

    # ------------------------------------------------------------- back-office --
    def pending_profile_changes(self, status: str | None = None, user_type: str | None = None) -> list[dict]:
        params = {k: v for k, v in {"status": status, "userType": user_type}.items() if v}
        return self.request("GET", "/api/admin/pending-profile-changes", params=params)

    def review_profile_change(self, change_id: int, approved: bool, comment: str | None = None) -> dict:
        return self.request(
            "POST",
            f"/api/admin/pending-profile-changes/{change_id}/review",
            json={"approved": approved, "comment": comment},
        )

    def approve_registration(self, role: RoleType, user_id: int) -> dict:
        return self.request("POST", f"/api/admin/{RoleType(role).value}s/{user_id}/approve")

    def reject_registration(self, role: RoleType, user_id: int, reason: str) -> dict:
        return self.request("POST", f"/api/admin/{RoleType(role).value}s/{user_id}/reject", json={"reason": reason})

    def statuses(self) -> dict:
        return self.request("GET", "/api/meta/statuses")

    def close(self) -> None:
        self.http.close()


def poll(
    fetch: Callable[[], Any],
    interval: float,
    *,
    stop: Callable[[Any], bool] = lambda _: False,
    max_iterations: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """Chama ``fetch`` a cada ``interval`` segundos até ``stop(result)`` ou o limite de iterações."""
    iterations = 0
    while True:
        result = fetch()
        iterations += 1
        if stop(result) or (max_iterations is not None and iterations >= max_iterations):
            return result
        sleep(interval)
