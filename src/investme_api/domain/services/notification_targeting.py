"""Resolução do público de uma notificação da plataforma."""
from investme_api.domain.entities.enums import AudienceType, RoleType

AUDIENCE_ROLES = {
    AudienceType.entrepreneur: {RoleType.entrepreneur},
    AudienceType.investor: {RoleType.investor},
    AudienceType.both: {RoleType.entrepreneur, RoleType.investor},
}


def resolve_recipients(notification, users) -> set[int]:
    """Ids dos usuários que recebem ``notification`` dentre ``users``.

    Um destinatário específico tem prioridade sobre ``tipo_usuario``; caso
    contrário o público são os usuários ativos com algum dos perfis do tipo.
    """
    if notification.usuario_especifico_id is not None:
        return {notification.usuario_especifico_id}
    roles = AUDIENCE_ROLES[AudienceType(notification.tipo_usuario)]
    return {user.id for user in users if user.is_active and user.role_types & roles}


def is_addressed_to(notification, user) -> bool:
    if notification.usuario_especifico_id is not None:
        return notification.usuario_especifico_id == user.id
    roles = AUDIENCE_ROLES[AudienceType(notification.tipo_usuario)]
    return bool(user.is_active and user.role_types & roles)
