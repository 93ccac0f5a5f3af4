"""Fluxo de dupla aprovação de alterações de perfil.

O usuário propõe a alteração, que fica registrada como ``pending`` sem tocar
no perfil; um administrador aprova (copiando os campos para o perfil) ou
reprova. A troca de status é um UPDATE condicional, então uma revisão
duplicada concorrente afeta zero linhas e falha com ``ChangeNotPending``.
"""
import logging
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from investme_api.adapters.repository.user_repository import UserRepository
from investme_api.adapters.repository.pending_change_repository import PendingChangeRepository
from investme_api.adapters.repository.audit_repository import AuditRepository
from investme_api.application.utils.utils import utcnow, is_not_null_violation
from investme_api.domain.entities.enums import RoleType, ChangeStatus
from investme_api.domain.entities.pending_change_entity import PendingProfileChange
from investme_api.domain.exceptions import (
    ValidationError, NotFoundError, RoleNotHeld, ConflictError, ChangeAlreadyPending, ChangeNotPending,
)
from investme_api.domain.models.profile_change_models import ProfileUpdateRequest, PendingChangeRead, ChangeOwner

logger = logging.getLogger(__name__)

# nome na API -> atributo do usuário
PROFILE_FIELDS = {
    "nomeCompleto": "nome_completo",
    "email": "email",
    "telefone": "telefone",
    "cep": "cep",
    "rua": "rua",
    "numero": "numero",
    "complemento": "complemento",
    "bairro": "bairro",
    "cidade": "cidade",
    "estado": "estado",
}
INVESTOR_ONLY_FIELDS = {"limiteInvestimento": "limite_investimento"}
# colunas NOT NULL em users
REQUIRED_ATTRS = ("nome_completo", "email")

CHANGEABLE_ROLES = (RoleType.entrepreneur, RoleType.investor)


def editable_fields(user_type: RoleType) -> dict[str, str]:
    if RoleType(user_type) == RoleType.investor:
        return {**PROFILE_FIELDS, **INVESTOR_ONLY_FIELDS}
    return dict(PROFILE_FIELDS)


class ProfileChangeUseCases:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PendingChangeRepository(db)
        self.repo_user = UserRepository(db)
        self.repo_audit = AuditRepository(db)

    def submit_change(self, user_id: int, user_type: RoleType, changed_fields: dict) -> int:
        if user_type not in CHANGEABLE_ROLES:
            raise ValidationError("Tipo de usuário inválido para alteração de perfil")
        user_type = RoleType(user_type)

        user = self.repo_user.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuário não encontrado")
        if user.get_role(user_type) is None:
            raise RoleNotHeld(user_type.value)

        normalized = self._normalize(user_type, changed_fields)

        if self.repo.get_pending_for_user(user_id) is not None:
            raise ChangeAlreadyPending()

        try:
            change = self.repo.create(
                user_id=user_id,
                user_type=user_type,
                changed_fields=normalized,
                requested_at=utcnow(),
            )
            self.db.commit()
        except IntegrityError:
            # índice parcial: outra submissão venceu a corrida
            self.db.rollback()
            raise ChangeAlreadyPending()

        logger.info("Alteração de perfil %s registrada para o usuário %s", change.id, user_id)
        return change.id

    def _normalize(self, user_type: RoleType, changed_fields: dict) -> dict:
        if not isinstance(changed_fields, dict) or not changed_fields:
            raise ValidationError("Nenhum campo alterado")

        allowed = editable_fields(user_type)
        wire = {}
        for key, value in changed_fields.items():
            name = key if key in allowed else to_camel(key)
            if name not in allowed:
                raise ValidationError(f"Campo '{key}' não pode ser alterado")
            wire[name] = value

        try:
            parsed = ProfileUpdateRequest.model_validate(wire)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            raise ValidationError(f"Valor inválido para '{first['loc'][0]}': {first['msg']}")
        return parsed.model_dump(by_alias=True, exclude_unset=True, mode="json")

    def review(self, change_id: int, reviewer_id: int, approve: bool, comment: str | None = None) -> PendingProfileChange:
        change = self.repo.get(change_id)
        if change is None:
            raise NotFoundError("Alteração de perfil não encontrada")
        if change.status != ChangeStatus.pending:
            raise ChangeNotPending()

        user = self.repo_user.get_by_id(change.user_id)
        previous = None
        if approve:
            if user is None:
                raise NotFoundError("Usuário não encontrado")
            values = self._live_values(change)
            if "email" in values and self.repo_user.email_taken(values["email"], exclude_user_id=user.id):
                raise ConflictError("E-mail já cadastrado para outro usuário")
            previous = {attr: getattr(user, attr) for attr in values}

        target = ChangeStatus.approved if approve else ChangeStatus.rejected
        updated = self.repo.mark_reviewed(
            change_id,
            status=target,
            reviewed_by=reviewer_id,
            reviewed_at=utcnow(),
            comment=comment,
        )
        if updated == 0:
            self.db.rollback()
            raise ChangeNotPending()

        try:
            if approve:
                self.repo_user.update_fields(user, values)
            self.repo_audit.record(
                acao=f"profile_change_{target.value}",
                entidade_tipo="pending_profile_change",
                entidade_id=change_id,
                admin_user_id=reviewer_id,
                valor_anterior=previous,
                valor_novo=change.changed_fields if approve else None,
                observacoes=comment,
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_not_null_violation(exc):
                raise ValidationError("Alteração apaga um campo obrigatório do perfil")
            raise ConflictError("E-mail já cadastrado para outro usuário")

        self.db.refresh(change)
        logger.info("Alteração de perfil %s %s por %s", change_id, target.value, reviewer_id)
        return change

    def _live_values(self, change: PendingProfileChange) -> dict:
        allowed = editable_fields(change.user_type)
        values = {}
        for name, value in change.changed_fields.items():
            attr = allowed.get(name)
            if attr is not None:
                values[attr] = value.strip().lower() if attr == "email" and isinstance(value, str) else value
        missing = [attr for attr in REQUIRED_ATTRS if attr in values and not str(values[attr] or "").strip()]
        if missing:
            raise ValidationError(f"Campo obrigatório vazio na alteração: {missing[0]}")
        return values

    def list_changes(self, status: ChangeStatus | None = None, user_type: RoleType | None = None) -> list[PendingChangeRead]:
        result = []
        for change in self.repo.find_all(status=status, user_type=user_type):
            read = PendingChangeRead.model_validate(change)
            user = self.repo_user.get_by_id(change.user_id)
            if user is not None:
                read = read.model_copy(update={"user": ChangeOwner.model_validate(user)})
            result.append(read)
        return result

    def current_pending(self, user_id: int, user_type: RoleType) -> PendingProfileChange | None:
        return self.repo.get_pending_for_user(user_id, RoleType(user_type))
