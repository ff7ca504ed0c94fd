"""SQLAlchemy ORM models for the gold financing schema"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

MONEY = Numeric(18, 2)


class UserRow(Base):
    """Back-office or customer account"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(80), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    role = Column(String(32), nullable=False, default="customer")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ClientRow(Base):
    """Financing applicant"""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=True)
    identification_number = Column(Text, nullable=False)
    identification_type = Column(String(32), nullable=False)
    nationality = Column(Text, nullable=False, default="Malaysian")
    state_of_residence = Column(Text, nullable=True)
    religion = Column(Text, nullable=True)
    race = Column(Text, nullable=True)
    regulatory_consent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loans = relationship("LoanRow", back_populates="client")


class GoldItemRow(Base):
    """Pledged gold collateral unit"""

    __tablename__ = "gold_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(32), nullable=False)
    weight = Column(Numeric(12, 3), nullable=False)
    purity = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    estimated_value = Column(MONEY, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class LoanGoldItemRow(Base):
    """Ordered link between a loan and the gold items securing it"""

    __tablename__ = "loan_gold_items"

    loan_id = Column(Integer, ForeignKey("loans.id", ondelete="CASCADE"), primary_key=True)
    gold_item_id = Column(Integer, ForeignKey("gold_items.id"), primary_key=True)
    position = Column(Integer, nullable=False)

    loan = relationship("LoanRow", back_populates="gold_item_links")


class LoanRow(Base):
    """Gold-backed financing contract"""

    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    contract_number = Column(String(64), nullable=False, unique=True)
    total_gold_value = Column(MONEY, nullable=False)
    financing_amount = Column(MONEY, nullable=False)
    financing_ratio = Column(Numeric(6, 4), nullable=False)
    status = Column(String(32), nullable=False, default="pending", index=True)
    profit_rate = Column(Numeric(7, 4), nullable=False)
    term_months = Column(Integer, nullable=False)
    payment_frequency = Column(String(32), nullable=False)
    shariah_contract_type = Column(String(32), nullable=False, default="murabaha")
    aqad_date = Column(DateTime(timezone=True), nullable=True)
    regulator_approval_status = Column(String(32), nullable=False, default="pending")
    regulator_reference_number = Column(Text, nullable=True)
    stamp_duty = Column(MONEY, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client = relationship("ClientRow", back_populates="loans")
    gold_item_links = relationship(
        "LoanGoldItemRow",
        back_populates="loan",
        order_by="LoanGoldItemRow.position",
        cascade="all, delete-orphan",
    )
    payments = relationship("PaymentRow", back_populates="loan", cascade="all, delete-orphan")
    documents = relationship("DocumentRow", back_populates="loan", cascade="all, delete-orphan")


class PaymentRow(Base):
    """Installment within a repayment schedule"""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    paid_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(32), nullable=False, default="pending", index=True)
    payment_method = Column(Text, nullable=True)
    reference_number = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRow", back_populates="payments")


class DocumentRow(Base):
    """Loan paperwork"""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    document_number = Column(Text, nullable=True)
    issuing_authority = Column(Text, nullable=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRow", back_populates="documents")


class NotificationRow(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default="unread")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GoldPriceRow(Base):
    """Append-only spot price series"""

    __tablename__ = "gold_price_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    price_per_ounce = Column(Numeric(14, 2), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
