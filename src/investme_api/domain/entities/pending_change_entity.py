from investme_api.infrastructure.database import Base
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, JSON, Index, Enum as SAEnum, text
from sqlalchemy.orm import Mapped, mapped_column
from investme_api.domain.entities.enums import RoleType, ChangeStatus


class PendingProfileChange(Base):
    __tablename__ = "pending_profile_changes"
    __table_args__ = (
        # no máximo uma alteração pendente por usuário
        Index(
            "uq_pending_profile_changes_user_pending",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    user_type: Mapped[RoleType] = mapped_column(SAEnum(RoleType, name="roletype"), nullable=False)
    changed_fields: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[ChangeStatus] = mapped_column(
        SAEnum(ChangeStatus, name="changestatus"), nullable=False, default=ChangeStatus.pending
    )
    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    review_comment: Mapped[str | None] = mapped_column(String(1000), nullable=True)
