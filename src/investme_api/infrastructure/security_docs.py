# infrastructure/security_docs.py
from fastapi import Depends
from fastapi.security import HTTPBearer

# auto_error=False: token ausente vira AuthError (401) em get_current_user
http_bearer = HTTPBearer(
    auto_error=False,
    scheme_name="InvestmeJWT",
    description="Token JWT retornado pelos endpoints de login.",
)


def swagger_bearer_auth():
    """Registra o esquema Bearer nas rotas do router para o botão Authorize."""
    return Depends(http_bearer)
