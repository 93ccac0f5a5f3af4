# user_classes.py
from dataclasses import dataclass, field
from investme_api.domain.entities.enums import RoleType, PartyType

_PARTY_BY_ROLE = {
    RoleType.entrepreneur: PartyType.company,
    RoleType.investor: PartyType.investor,
    RoleType.admin: PartyType.admin,
}

@dataclass(frozen=True)
class UserEntity:
    id: int
    email: str
    nome_completo: str
    role: RoleType
    is_active: bool
    roles: frozenset[RoleType] = field(default_factory=frozenset)

    @property
    def party(self) -> PartyType:
        return _PARTY_BY_ROLE[self.role]
