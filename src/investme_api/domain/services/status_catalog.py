"""Vocabulário de status por entidade, com rótulo e variante de badge."""
from investme_api.domain.entities.enums import (
    RegistrationStatus,
    CreditRequestStatus,
    ChangeStatus,
    ValuationStatus,
)

STATUS_CATALOG = {
    "company": {
        RegistrationStatus.pendente_analise: ("Pendente de análise", "secondary"),
        RegistrationStatus.em_analise: ("Em análise", "warning"),
        RegistrationStatus.aprovada: ("Aprovada", "success"),
        RegistrationStatus.reprovada: ("Reprovada", "destructive"),
        RegistrationStatus.incompleto: ("Incompleto", "outline"),
    },
    "registration": {
        RegistrationStatus.pendente_analise: ("Aguardando aprovação", "secondary"),
        RegistrationStatus.em_analise: ("Em análise", "warning"),
        RegistrationStatus.aprovada: ("Aprovado", "success"),
        RegistrationStatus.reprovada: ("Reprovado", "destructive"),
        RegistrationStatus.incompleto: ("Cadastro incompleto", "outline"),
    },
    "credit_request": {
        CreditRequestStatus.pendente: ("Pendente", "secondary"),
        CreditRequestStatus.em_analise: ("Em análise", "warning"),
        CreditRequestStatus.aprovada: ("Aprovada", "success"),
        CreditRequestStatus.reprovada: ("Reprovada", "destructive"),
    },
    "profile_change": {
        ChangeStatus.pending: ("Pendente", "warning"),
        ChangeStatus.approved: ("Aprovada", "success"),
        ChangeStatus.rejected: ("Rejeitada", "destructive"),
    },
    "valuation": {
        ValuationStatus.draft: ("Rascunho", "secondary"),
        ValuationStatus.completed: ("Concluído", "success"),
    },
    "notification": {
        True: ("Ativa", "success"),
        False: ("Inativa", "secondary"),
    },
}


def status_label(entity: str, status) -> str:
    return STATUS_CATALOG[entity][status][0]


def catalog_as_dict() -> dict:
    out = {}
    for entity, entries in STATUS_CATALOG.items():
        out[entity] = [
            {
                "value": status.value if hasattr(status, "value") else status,
                "label": label,
                "variant": variant,
            }
            for status, (label, variant) in entries.items()
        ]
    return out
