from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from retailpos.db.base import Base


class CashMovement(Base):
    __tablename__ = "cash_movements"

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"))
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"))
    customer_payment_id = Column(Integer, ForeignKey("customer_payments.id", ondelete="CASCADE"))
    movement_type = Column(String(20), nullable=False)
    payment_method = Column(String(20), nullable=False, default="cash")
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text)
    reference_number = Column(String(40))
    movement_date = Column(Date, nullable=False)
    # "<branch>:<date>:<type>" on opening/closing rows, NULL elsewhere
    drawer_guard = Column(String(60), unique=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    sale = relationship("Sale")
