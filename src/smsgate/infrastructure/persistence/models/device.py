"""Gateway devices. Only ownership is mapped; the admin needs nothing else."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import created_at, flag, id_column, reference


class DeviceModel(Base):
    __tablename__ = "devices"

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = reference("users.id")
    brand: Mapped[str | None] = mapped_column(String(100))
    model: Mapped[str | None] = mapped_column(String(100))
    enabled: Mapped[bool] = flag(True)
    created_at: Mapped[datetime] = created_at()

    def __repr__(self) -> str:
        return f"<Device {self.id} user={self.user_id}>"
