from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from retailpos.db.base import Base


class Personnel(Base):
    __tablename__ = "personnel"

    id = Column(Integer, primary_key=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    full_name = Column(String(255), nullable=False)
    national_id = Column(String(11))
    position = Column(String(100))
    phone = Column(String(50))
    salary = Column(Numeric(12, 2), nullable=False, default=0)
    start_date = Column(Date)
    end_date = Column(Date)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    transactions = relationship("PersonnelTransaction", back_populates="personnel", cascade="all, delete-orphan")


class PersonnelTransaction(Base):
    __tablename__ = "personnel_transactions"

    id = Column(Integer, primary_key=True)
    transaction_number = Column(String(40), nullable=False, unique=True)
    personnel_id = Column(Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"))
    transaction_date = Column(Date, nullable=False)
    transaction_type = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    debit_amount = Column(Numeric(12, 2), nullable=False, default=0)
    credit_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_type = Column(String(20))
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    personnel = relationship("Personnel", back_populates="transactions")
