"""SQLAlchemy models for smallbooks database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    CheckConstraint,
    UniqueConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from smallbooks.domain.entities import (
    AccountType,
    NormalBalance,
    TransactionType,
    TransactionStatus,
    ImportBatchStatus,
)

Base = declarative_base()


def _enum(enum_cls, name: str) -> Enum:
    # Store enum values ("asset"), not member names ("ASSET")
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Account(Base):
    """Chart of accounts entry."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String, nullable=False)
    type = Column(_enum(AccountType, "account_type"), nullable=False)
    normal_balance = Column(_enum(NormalBalance, "normal_balance"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    lines = relationship("TransactionLine", back_populates="account")


class Transaction(Base):
    """Ledger transaction header."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    reference = Column(String(50), nullable=True)
    type = Column(
        _enum(TransactionType, "transaction_type"), default=TransactionType.JOURNAL, nullable=False
    )
    status = Column(
        _enum(TransactionStatus, "transaction_status"),
        default=TransactionStatus.POSTED,
        nullable=False,
    )
    user_id = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_status", "status"),
    )

    # Lines are owned by their transaction
    lines = relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.id",
    )


class TransactionLine(Base):
    """Debit or credit posting of a transaction."""

    __tablename__ = "transaction_lines"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    debit = Column(Numeric(15, 2), default=0, nullable=False)
    credit = Column(Numeric(15, 2), default=0, nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, nullable=True)

    # Exactly one side of a line carries the amount
    __table_args__ = (
        CheckConstraint("debit >= 0 AND credit >= 0", name="ck_line_non_negative"),
        CheckConstraint("(debit > 0) <> (credit > 0)", name="ck_line_one_side"),
    )

    transaction = relationship("Transaction", back_populates="lines")
    account = relationship("Account", back_populates="lines")


class CategorizationRule(Base):
    """Learned description pattern -> account mapping."""

    __tablename__ = "categorization_rules"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    pattern = Column(Text, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    confidence = Column(Numeric(5, 4), default=1, nullable=False)
    match_count = Column(Integer, default=1, nullable=False)
    last_matched = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "pattern", "account_id", name="uq_rule_user_pattern_account"),
        CheckConstraint("confidence >= 0 AND confidence <= 1", name="ck_rule_confidence_range"),
        CheckConstraint("match_count >= 1", name="ck_rule_match_count"),
    )

    account = relationship("Account")


class ImportBatch(Base):
    """CSV upload record."""

    __tablename__ = "import_batches"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    row_count = Column(Integer, default=0, nullable=False)
    success_count = Column(Integer, default=0, nullable=False)
    error_count = Column(Integer, default=0, nullable=False)
    status = Column(
        _enum(ImportBatchStatus, "import_batch_status"),
        default=ImportBatchStatus.PROCESSING,
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)

    if engine.dialect.name == "sqlite":
        # SQLite's built-in lower() only folds ASCII
        @event.listens_for(engine, "connect")
        def _register_lower(dbapi_connection, connection_record):
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
