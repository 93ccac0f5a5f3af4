from sqlalchemy.orm import Session
from sqlalchemy import select, update, or_
from investme_api.domain.entities.user_entity import User, UserRole
from investme_api.domain.entities.enums import RoleType, RegistrationStatus
from investme_api.application.utils.utils import only_digits


class UserRepository:
    """Acesso a usuários e aos seus perfis (SQLAlchemy)."""

    def __init__(self, db: Session):
        self.db = db

    # Queries
    def get_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        query = select(User).where(User.email == email.strip().lower())
        return self.db.execute(query).scalar_one_or_none()

    def get_by_cpf(self, cpf: str) -> User | None:
        query = select(User).where(User.cpf == only_digits(cpf))
        return self.db.execute(query).scalar_one_or_none()

    def get_by_login(self, login: str) -> User | None:
        """Login aceita e-mail ou CPF (com ou sem máscara)."""
        login = (login or "").strip()
        if "@" in login:
            return self.get_by_email(login)
        return self.get_by_cpf(login)

    def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        query = select(User.id).where(User.email == email.strip().lower())
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        return self.db.execute(query).first() is not None

    def list_by_role(self, role: RoleType, status: RegistrationStatus | None = None) -> list[tuple[User, UserRole]]:
        query = (
            select(User, UserRole)
            .join(UserRole, UserRole.user_id == User.id)
            .where(UserRole.role == role)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        if status is not None:
            query = query.where(UserRole.status == status)
        return list(self.db.execute(query).all())

    def list_active_with_roles(self, roles: set[RoleType]) -> list[User]:
        query = (
            select(User)
            .join(UserRole, UserRole.user_id == User.id)
            .where(User.is_active.is_(True), UserRole.role.in_(roles))
            .distinct()
            .order_by(User.nome_completo)
        )
        return list(self.db.execute(query).scalars().all())

    def list_all(self) -> list[User]:
        return list(self.db.execute(select(User).order_by(User.id)).scalars().all())

    def count_by_role(self, role: RoleType, status: RegistrationStatus | None = None) -> int:
        return len(self.list_by_role(role, status))

    # Commands
    def create(self, *, email: str, hashed_password: str, nome_completo: str, cpf: str | None = None, **fields) -> User:
        user = User(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            nome_completo=nome_completo,
            cpf=cpf,
            is_active=True,
            **fields,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def add_role(self, user: User, role: RoleType, **flags) -> UserRole:
        held = UserRole(role=role, **flags)
        user.roles.append(held)
        self.db.flush()
        return held

    def update_fields(self, user: User, values: dict) -> User:
        for attr, value in values.items():
            setattr(user, attr, value)
        self.db.add(user)
        self.db.flush()
        return user

    def update_password(self, user: User, hashed_password: str) -> User:
        user.hashed_password = hashed_password
        self.db.flush()
        return user

    def transition_role_status(self, role_id: int, expected: RegistrationStatus, values: dict) -> int:
        """Troca o status do perfil só se ele ainda estiver em ``expected``."""
        query = (
            update(UserRole)
            .where(UserRole.id == role_id, UserRole.status == expected)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(query).rowcount
