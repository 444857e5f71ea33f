from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from domain.models.currency import RATE_SCALE


class Base(DeclarativeBase):
	pass


class CurrencyDB(Base):
	__tablename__ = 'currencies'

	code: Mapped[str] = mapped_column(String(3), primary_key=True)
	name: Mapped[str | None] = mapped_column(String(100), nullable=True)
	created_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), nullable=False, server_default=func.now()
	)


class RateHistoryDB(Base):
	__tablename__ = 'rate_history'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	base_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	target_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=28, scale=RATE_SCALE), nullable=False)
	timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
	provider: Mapped[str] = mapped_column(String(50), nullable=False)

	# Not unique: overlapping refreshes may append the same pair twice.
	__table_args__ = (
		Index('idx_base_target_timestamp', 'base_currency', 'target_currency', 'timestamp'),
	)
