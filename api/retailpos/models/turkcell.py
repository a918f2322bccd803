from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func

from retailpos.db.base import Base


class TurkcellTransaction(Base):
    __tablename__ = "turkcell_transactions"

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"))
    transaction_date = Column(Date, nullable=False)
    transaction_type = Column(String(50), nullable=False)
    count = Column(Integer, nullable=False, default=1)
    description = Column(Text)
    reference_number = Column(String(50))
    created_at = Column(DateTime, server_default=func.now())


class TurkcellTarget(Base):
    __tablename__ = "turkcell_targets"
    __table_args__ = (UniqueConstraint("branch_id", "target_month", name="uq_turkcell_target_month"),)

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"))
    target_month = Column(Date, nullable=False)
    target_count = Column(Integer, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
