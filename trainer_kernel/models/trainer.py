"""
Module: trainer_kernel.models.trainer
Responsibility: ORM persistence for trainers -- the people ledger hours are
    credited to.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from trainer_kernel.db.base import TrackedBase


class Trainer(TrackedBase):
    """
    A club trainer.

    Contract:
        Trainers are master data owned by MasterDataService.  Assignment
        writes reject trainer ids that have no row here.
    """

    __tablename__ = "trainers"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Trainer {self.id}: {self.first_name} {self.last_name}>"
