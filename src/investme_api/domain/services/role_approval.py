"""Projeção somente-leitura do estado de aprovação de cada perfil de um usuário.

Um perfil é utilizável quando todas as flags exigidas estão marcadas. Um
perfil parcialmente aprovado continua acessível em modo restrito; um perfil
inexistente é outra condição (``RoleNotHeld``) e nunca deve ser confundido com
"aguardando aprovação".
"""
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.exceptions import RoleNotHeld

# atributo do ORM -> nome exposto na API
FLAG_WIRE_NAMES = {
    "cadastro_aprovado": "cadastroAprovado",
    "email_confirmado": "emailConfirmado",
    "documentos_verificados": "documentosVerificados",
    "renda_comprovada": "rendaComprovada",
    "perfil_investidor": "perfilInvestidor",
}
WIRE_TO_FLAG = {wire: attr for attr, wire in FLAG_WIRE_NAMES.items()}

_BASE_FLAGS = ("cadastro_aprovado", "email_confirmado", "documentos_verificados")

REQUIRED_FLAGS: dict[RoleType, tuple[str, ...]] = {
    RoleType.entrepreneur: _BASE_FLAGS,
    RoleType.investor: _BASE_FLAGS + ("renda_comprovada", "perfil_investidor"),
    RoleType.admin: (),
}


def _held_role(user, role: RoleType):
    held = user.get_role(RoleType(role))
    if held is None:
        raise RoleNotHeld(RoleType(role).value)
    return held


def missing_requirements(user, role: RoleType) -> set[str]:
    held = _held_role(user, role)
    return {
        FLAG_WIRE_NAMES[flag]
        for flag in REQUIRED_FLAGS[held.role]
        if not getattr(held, flag)
    }


def is_role_fully_approved(user, role: RoleType) -> bool:
    return not missing_requirements(user, role)


def editable_flags(role: RoleType) -> set[str]:
    """Flags que o back-office pode alternar individualmente (approve-field)."""
    return {FLAG_WIRE_NAMES[flag] for flag in REQUIRED_FLAGS[RoleType(role)]}


def role_summary(user) -> list[dict]:
    summary = []
    for held in sorted(user.roles, key=lambda r: r.role.value):
        missing = missing_requirements(user, held.role)
        summary.append({
            "role": held.role,
            "status": held.status,
            "fully_approved": not missing,
            "missing_requirements": sorted(missing),
        })
    return summary
