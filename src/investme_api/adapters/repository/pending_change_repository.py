from sqlalchemy.orm import Session
from sqlalchemy import select, update
from investme_api.domain.entities.pending_change_entity import PendingProfileChange
from investme_api.domain.entities.enums import ChangeStatus, RoleType


class PendingChangeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, change_id: int) -> PendingProfileChange | None:
        return self.db.get(PendingProfileChange, change_id)

    def get_pending_for_user(self, user_id: int, user_type: RoleType | None = None) -> PendingProfileChange | None:
        query = select(PendingProfileChange).where(
            PendingProfileChange.user_id == user_id,
            PendingProfileChange.status == ChangeStatus.pending,
        )
        if user_type is not None:
            query = query.where(PendingProfileChange.user_type == user_type)
        return self.db.execute(query).scalars().first()

    def create(self, *, user_id: int, user_type: RoleType, changed_fields: dict, requested_at) -> PendingProfileChange:
        change = PendingProfileChange(
            user_id=user_id,
            user_type=user_type,
            changed_fields=changed_fields,
            status=ChangeStatus.pending,
            requested_at=requested_at,
        )
        self.db.add(change)
        self.db.flush()
        return change

    def mark_reviewed(self, change_id: int, *, status: ChangeStatus, reviewed_by: int, reviewed_at, comment: str | None) -> int:
        query = (
            update(PendingProfileChange)
            .where(PendingProfileChange.id == change_id, PendingProfileChange.status == ChangeStatus.pending)
            .values(status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, review_comment=comment)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(query).rowcount

    def find_all(self, status: ChangeStatus | None = None, user_type: RoleType | None = None) -> list[PendingProfileChange]:
        query = select(PendingProfileChange).order_by(
            PendingProfileChange.requested_at.desc(), PendingProfileChange.id.desc()
        )
        if status is not None:
            query = query.where(PendingProfileChange.status == status)
        if user_type is not None:
            query = query.where(PendingProfileChange.user_type == user_type)
        return list(self.db.execute(query).scalars().all())
