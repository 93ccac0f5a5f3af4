# exceptions.py
"""Erros de domínio da plataforma.

Os casos de uso levantam estas exceções; ``main.py`` converte cada família
em uma resposta HTTP ``{"detail": ...}``. O cliente HTTP faz o caminho
inverso a partir do status da resposta.
"""


class DomainError(Exception):
    status_code = 400
    default_message = "Erro na operação"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Dados inválidos"


class ConflictError(DomainError):
    status_code = 409
    default_message = "Operação não permitida no estado atual"


class ChangeAlreadyPending(ConflictError):
    default_message = "Já existe uma alteração de perfil aguardando aprovação"


class ChangeNotPending(ConflictError):
    default_message = "Esta alteração já foi revisada"


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Registro não encontrado"


class AuthError(DomainError):
    status_code = 401
    default_message = "Token de acesso inválido ou expirado"


class PermissionDenied(AuthError):
    status_code = 403
    default_message = "Acesso negado"


class RoleNotHeld(PermissionDenied):
    default_message = "Usuário não possui este perfil"

    def __init__(self, role: str | None = None, message: str | None = None):
        self.role = role
        if message is None and role is not None:
            message = f"Usuário não possui o perfil '{role}'"
        super().__init__(message)


class NetworkError(DomainError):
    """Falha de transporte; só é levantada pelo cliente HTTP."""

    status_code = 503
    default_message = "Falha de comunicação com o servidor"
