"""create marketplace tables

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 12:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    'roletype': ('entrepreneur', 'investor', 'admin'),
    'registrationstatus': ('pendente_analise', 'em_analise', 'aprovada', 'reprovada', 'incompleto'),
    'companystatus': ('pendente_analise', 'em_analise', 'aprovada', 'reprovada', 'incompleto'),
    'creditrequeststatus': ('pendente', 'em_analise', 'aprovada', 'reprovada'),
    'changestatus': ('pending', 'approved', 'rejected'),
    'audiencetype': ('entrepreneur', 'investor', 'both'),
    'adminprofile': ('visualizacao', 'aprovacao_empresa', 'aprovacao_credito', 'admin'),
    'partytype': ('company', 'investor', 'admin'),
    'valuationmethod': ('dcf', 'multiples'),
    'valuationstatus': ('draft', 'completed'),
    'guaranteetype': ('imovel', 'veiculo', 'recebivel'),
}


def _enum(name: str):
    # no Postgres o tipo é criado uma única vez em upgrade()
    values = ENUMS[name]
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), 'postgresql'
    )


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _address(required: bool):
    return [
        sa.Column('cep', sa.String(length=8), nullable=not required),
        sa.Column('rua', sa.String(length=255), nullable=not required),
        sa.Column('numero', sa.String(length=20), nullable=not required),
        sa.Column('complemento', sa.String(length=255), nullable=True),
        sa.Column('bairro', sa.String(length=255), nullable=not required),
        sa.Column('cidade', sa.String(length=255), nullable=not required),
        sa.Column('estado', sa.String(length=2), nullable=not required),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('cpf', sa.String(length=11), nullable=True),
        sa.Column('rg', sa.String(length=20), nullable=True),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('nome_completo', sa.String(length=255), nullable=False),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        *_address(required=False),
        sa.Column('limite_investimento', sa.String(length=50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('status_changed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_cpf', 'users', ['cpf'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', _enum('roletype'), nullable=False),
        sa.Column('status', _enum('registrationstatus'), nullable=False),
        sa.Column('cadastro_aprovado', sa.Boolean(), nullable=False),
        sa.Column('email_confirmado', sa.Boolean(), nullable=False),
        sa.Column('documentos_verificados', sa.Boolean(), nullable=False),
        sa.Column('renda_comprovada', sa.Boolean(), nullable=False),
        sa.Column('perfil_investidor', sa.Boolean(), nullable=False),
        sa.Column('admin_perfil', _enum('adminprofile'), nullable=True),
        sa.Column('motivo_reprovacao', sa.String(length=1000), nullable=True),
        sa.Column('aprovado_por', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('aprovado_em', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_id', 'user_roles', ['id'])
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('razao_social', sa.String(length=255), nullable=False),
        sa.Column('nome_fantasia', sa.String(length=255), nullable=True),
        sa.Column('cnpj', sa.String(length=14), nullable=False),
        *_address(required=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('email_contato', sa.String(length=255), nullable=True),
        sa.Column('cnae_principal', sa.String(length=20), nullable=False),
        sa.Column('cnae_secundarios', sa.JSON(), nullable=False),
        sa.Column('inscricao_estadual', sa.String(length=50), nullable=True),
        sa.Column('inscricao_municipal', sa.String(length=50), nullable=True),
        sa.Column('data_fundacao', sa.DateTime(timezone=True), nullable=True),
        sa.Column('faturamento', sa.Numeric(15, 2), nullable=False),
        sa.Column('ebitda', sa.Numeric(15, 2), nullable=False),
        sa.Column('divida_liquida', sa.Numeric(15, 2), nullable=False),
        sa.Column('numero_funcionarios', sa.Integer(), nullable=True),
        sa.Column('descricao_negocio', sa.Text(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('status', _enum('companystatus'), nullable=False),
        sa.Column('observacoes_internas', sa.Text(), nullable=True),
        sa.Column('motivo_reprovacao', sa.Text(), nullable=True),
        sa.Column('analisado_por', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('data_analise', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_companies_id', 'companies', ['id'])
    op.create_index('ix_companies_owner_id', 'companies', ['owner_id'])
    op.create_index('ix_companies_cnpj', 'companies', ['cnpj'], unique=True)

    op.create_table(
        'company_shareholders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('nome_completo', sa.String(length=255), nullable=False),
        sa.Column('cpf', sa.String(length=11), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_company_shareholders_company_id', 'company_shareholders', ['company_id'])

    op.create_table(
        'company_guarantees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tipo', _enum('guaranteetype'), nullable=False),
        sa.Column('matricula', sa.String(length=100), nullable=True),
        sa.Column('renavam', sa.String(length=100), nullable=True),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('valor_estimado', sa.Numeric(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_company_guarantees_company_id', 'company_guarantees', ['company_id'])

    op.create_table(
        'credit_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('valor_solicitado', sa.Numeric(15, 2), nullable=False),
        sa.Column('prazo_meses', sa.Integer(), nullable=False),
        sa.Column('finalidade', sa.Text(), nullable=False),
        sa.Column('documentos', sa.JSON(), nullable=False),
        sa.Column('status', _enum('creditrequeststatus'), nullable=False),
        sa.Column('investor_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('data_aceite', sa.DateTime(timezone=True), nullable=True),
        sa.Column('observacoes_analise', sa.Text(), nullable=True),
        sa.Column('analisado_por', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('data_analise', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_credit_requests_id', 'credit_requests', ['id'])
    op.create_index('ix_credit_requests_company_id', 'credit_requests', ['company_id'])
    op.create_index('ix_credit_requests_investor_id', 'credit_requests', ['investor_id'])

    op.create_table(
        'pending_profile_changes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('user_type', _enum('roletype'), nullable=False),
        sa.Column('changed_fields', sa.JSON(), nullable=False),
        sa.Column('status', _enum('changestatus'), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('review_comment', sa.String(length=1000), nullable=True),
    )
    op.create_index('ix_pending_profile_changes_id', 'pending_profile_changes', ['id'])
    op.create_index('ix_pending_profile_changes_user_id', 'pending_profile_changes', ['user_id'])
    op.create_index(
        'uq_pending_profile_changes_user_pending',
        'pending_profile_changes',
        ['user_id'],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        'valuations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('user_type', _enum('roletype'), nullable=False),
        sa.Column('method', _enum('valuationmethod'), nullable=False),
        sa.Column('status', _enum('valuationstatus'), nullable=False),
        sa.Column('inputs', sa.JSON(), nullable=True),
        sa.Column('results', sa.JSON(), nullable=True),
        sa.Column('enterprise_value', sa.Numeric(18, 2), nullable=True),
        sa.Column('equity_value', sa.Numeric(18, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_valuations_id', 'valuations', ['id'])
    op.create_index('ix_valuations_company_id', 'valuations', ['company_id'])
    op.create_index('ix_valuations_user_id', 'valuations', ['user_id'])

    op.create_table(
        'platform_notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('titulo', sa.String(length=255), nullable=False),
        sa.Column('conteudo', sa.Text(), nullable=False),
        sa.Column('tipo_usuario', _enum('audiencetype'), nullable=False),
        sa.Column('usuario_especifico_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('usuario_especifico_tipo', _enum('roletype'), nullable=True),
        sa.Column('ativa', sa.Boolean(), nullable=False),
        sa.Column('criado_por', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_platform_notifications_id', 'platform_notifications', ['id'])
    op.create_index('ix_platform_notifications_usuario_especifico_id', 'platform_notifications', ['usuario_especifico_id'])

    op.create_table(
        'notification_reads',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('notification_id', sa.Integer(),
                  sa.ForeignKey('platform_notifications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('notification_id', 'user_id', name='uq_notification_reads_user'),
    )
    op.create_index('ix_notification_reads_notification_id', 'notification_reads', ['notification_id'])
    op.create_index('ix_notification_reads_user_id', 'notification_reads', ['user_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('conversation_id', sa.String(length=100), nullable=False),
        sa.Column('assunto', sa.String(length=255), nullable=True),
        sa.Column('remetente_tipo', _enum('partytype'), nullable=False),
        sa.Column('remetente_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('destinatario_tipo', _enum('partytype'), nullable=False),
        sa.Column('conteudo', sa.Text(), nullable=False),
        sa.Column('anexos', sa.JSON(), nullable=False),
        sa.Column('lida', sa.Boolean(), nullable=False),
        sa.Column('credit_request_id', sa.Integer(), sa.ForeignKey('credit_requests.id'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_messages_id', 'messages', ['id'])
    op.create_index('ix_messages_conversation_id', 'messages', ['conversation_id'])
    op.create_index('ix_messages_credit_request_id', 'messages', ['credit_request_id'])
    op.create_index('ix_messages_company_id', 'messages', ['company_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('acao', sa.String(length=100), nullable=False),
        sa.Column('entidade_tipo', sa.String(length=50), nullable=False),
        sa.Column('entidade_id', sa.Integer(), nullable=False),
        sa.Column('valor_anterior', sa.JSON(), nullable=True),
        sa.Column('valor_novo', sa.JSON(), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('admin_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])
    op.create_index('ix_audit_log_acao', 'audit_log', ['acao'])
    op.create_index('ix_audit_log_entidade_tipo', 'audit_log', ['entidade_tipo'])

    op.create_table(
        'email_confirmation_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', _enum('roletype'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_email_confirmation_tokens_token', 'email_confirmation_tokens', ['token'], unique=True)


def downgrade() -> None:
    for table in (
        'email_confirmation_tokens', 'audit_log', 'messages', 'notification_reads', 'platform_notifications',
        'valuations', 'pending_profile_changes', 'credit_requests', 'company_guarantees',
        'company_shareholders', 'companies', 'user_roles', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)
