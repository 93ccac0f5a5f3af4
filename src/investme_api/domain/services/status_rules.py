"""Máquinas de estado de aprovação compartilhadas por empresas, solicitações de
crédito e cadastros de empreendedores/investidores."""
from investme_api.domain.entities.enums import RegistrationStatus, CreditRequestStatus
from investme_api.domain.exceptions import ConflictError, ValidationError

REGISTRATION_TRANSITIONS = {
    RegistrationStatus.pendente_analise: {
        RegistrationStatus.em_analise,
        RegistrationStatus.incompleto,
        RegistrationStatus.aprovada,
        RegistrationStatus.reprovada,
    },
    RegistrationStatus.incompleto: {RegistrationStatus.pendente_analise, RegistrationStatus.reprovada},
    RegistrationStatus.em_analise: {RegistrationStatus.aprovada, RegistrationStatus.reprovada},
    RegistrationStatus.aprovada: set(),
    RegistrationStatus.reprovada: set(),
}

COMPANY_TRANSITIONS = REGISTRATION_TRANSITIONS

CREDIT_REQUEST_TRANSITIONS = {
    CreditRequestStatus.pendente: {
        CreditRequestStatus.em_analise,
        CreditRequestStatus.aprovada,
        CreditRequestStatus.reprovada,
    },
    CreditRequestStatus.em_analise: {CreditRequestStatus.aprovada, CreditRequestStatus.reprovada},
    CreditRequestStatus.aprovada: set(),
    CreditRequestStatus.reprovada: set(),
}

REJECTED_STATUSES = {RegistrationStatus.reprovada, CreditRequestStatus.reprovada}


def is_terminal(table: dict, status) -> bool:
    return not table[status]


def check_transition(table: dict, current, target, reason: str | None = None) -> None:
    """Valida ``current -> target``; levanta ConflictError ou ValidationError."""
    if target in REJECTED_STATUSES and not (reason or "").strip():
        raise ValidationError("Informe o motivo da reprovação")
    if current == target:
        raise ConflictError(f"Registro já está com status '{current.value}'")
    if target not in table[current]:
        raise ConflictError(f"Transição de '{current.value}' para '{target.value}' não permitida")
