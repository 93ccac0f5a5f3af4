# profile_controller.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from investme_api.infrastructure.database import get_db
from investme_api.infrastructure.security_docs import swagger_bearer_auth
from investme_api.domain.models.user_models import UserRead
from investme_api.domain.models.profile_change_models import PendingChangeRead, ChangeSubmitted
from investme_api.domain.entities.enums import RoleType
from investme_api.domain.entities.user_classes import UserEntity
from investme_api.application.use_cases.auth_use_cases import AuthenticationUseCases, to_user_read
from investme_api.application.use_cases.profile_change_use_cases import ProfileChangeUseCases
from investme_api.application.use_cases.security import require_roles

router = APIRouter(tags=["profiles"], dependencies=[swagger_bearer_auth()])

SUBMITTED_MESSAGE = "Alterações enviadas para aprovação do administrador."
# o token carrega o e-mail; aprovar a troca encerra as sessões abertas
EMAIL_CHANGE_NOTICE = " Após a aprovação da troca de e-mail será necessário entrar novamente com o novo endereço."


def _profile_routes(segment: str, role: RoleType):
    guard = require_roles(role)

    @router.get(f"/{segment}/profile", response_model=UserRead, name=f"{segment}_profile")
    def get_profile(db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        return to_user_read(AuthenticationUseCases(db).get_user(current.id))

    @router.put(f"/{segment}/profile", response_model=ChangeSubmitted, status_code=202, name=f"{segment}_profile_update")
    def update_profile(payload: dict = Body(...), db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        """
        Não altera o perfil: registra uma alteração pendente de aprovação.
        Corpo esperado: {"telefone": "...", "cidade": "..."} (nomes em camelCase)
        """
        change_id = ProfileChangeUseCases(db).submit_change(current.id, role, payload)
        message = SUBMITTED_MESSAGE + (EMAIL_CHANGE_NOTICE if "email" in payload else "")
        return ChangeSubmitted(message=message, id=change_id)

    @router.get(f"/{segment}/pending-profile-changes", response_model=PendingChangeRead | None,
                name=f"{segment}_pending_profile_changes")
    def pending_changes(db: Session = Depends(get_db), current: UserEntity = Depends(guard)):
        return ProfileChangeUseCases(db).current_pending(current.id, role)


_profile_routes("entrepreneur", RoleType.entrepreneur)
_profile_routes("investor", RoleType.investor)
