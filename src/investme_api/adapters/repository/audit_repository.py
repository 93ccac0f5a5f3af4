from sqlalchemy.orm import Session
from sqlalchemy import select
from investme_api.domain.entities.audit_entity import AuditLog
from investme_api.application.utils.utils import utcnow


class AuditRepository:
    def __init__(self, db: Session):
        self.db = db

    def record(self, *, acao: str, entidade_tipo: str, entidade_id: int, admin_user_id: int,
               valor_anterior: dict | None = None, valor_novo: dict | None = None,
               observacoes: str | None = None) -> AuditLog:
        entry = AuditLog(
            acao=acao,
            entidade_tipo=entidade_tipo,
            entidade_id=entidade_id,
            admin_user_id=admin_user_id,
            valor_anterior=valor_anterior,
            valor_novo=valor_novo,
            observacoes=observacoes,
            created_at=utcnow(),
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def find_all(self, entidade_tipo: str | None = None, entidade_id: int | None = None, limit: int = 200) -> list[AuditLog]:
        query = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        if entidade_tipo is not None:
            query = query.where(AuditLog.entidade_tipo == entidade_tipo)
        if entidade_id is not None:
            query = query.where(AuditLog.entidade_id == entidade_id)
        return list(self.db.execute(query.limit(limit)).scalars().all())
