"""
Investme - CLI Admin
Cria o primeiro administrador do back-office direto no banco.

Uso:
    investme-admin create-admin admin@investme.com.br "Nome Completo" --perfil admin
"""
import sys
import argparse
import getpass

from pydantic import ValidationError as PydanticValidationError

from investme_api.infrastructure.database import session_scope
from investme_api.infrastructure.logging_config import configure_logging
from investme_api.application.use_cases.admin_use_cases import AdminUseCases
from investme_api.domain.entities.enums import AdminProfile
from investme_api.domain.exceptions import DomainError
from investme_api.domain.models.user_models import AdminUserCreate


def cmd_create_admin(args) -> int:
    senha = args.senha or getpass.getpass("Senha: ")
    try:
        payload = AdminUserCreate(email=args.email, nome_completo=args.nome, senha=senha, admin_perfil=args.perfil)
    except PydanticValidationError as exc:
        print(f"Erro: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 2

    with session_scope() as db:
        try:
            admin = AdminUseCases(db).create_admin(payload)
        except DomainError as exc:
            print(f"Erro: {exc.message}", file=sys.stderr)
            return 1

    print(f"Administrador criado: {admin.email} (id {admin.id}, perfil {admin.admin_perfil.value})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="investme-admin", description="Ferramentas do back-office Investme")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-admin", help="Cria um usuário administrador")
    create.add_argument("email")
    create.add_argument("nome")
    create.add_argument("--senha", help="Senha (pergunta no terminal se omitida)")
    create.add_argument(
        "--perfil",
        default=AdminProfile.admin.value,
        choices=[p.value for p in AdminProfile],
    )
    create.set_defaults(func=cmd_create_admin)
    return parser


def main(argv=None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
