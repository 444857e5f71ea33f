from datetime import UTC, datetime

from sqlalchemy import func, select

from domain.models.currency import ReconciledRate
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import RateHistoryDB


def _as_utc(moment: datetime) -> datetime:
	# SQLite drops tzinfo on the way back; everything is written as UTC.
	if moment.tzinfo is None:
		return moment.replace(tzinfo=UTC)
	return moment.astimezone(UTC)


def _to_domain(row: RateHistoryDB) -> ReconciledRate:
	return ReconciledRate(
		base=row.base_currency,
		target=row.target_currency,
		rate=row.rate,
		timestamp=_as_utc(row.timestamp),
		provider=row.provider,
	)


class RateRepository:
	"""Append-only rate history.

	Every call runs in its own short session, so concurrent appends are
	independent inserts and a failed append never undoes earlier ones.
	"""

	def __init__(self, database: Database):
		self.database = database

	async def append(self, rate: ReconciledRate) -> None:
		async with self.database.session() as session:
			session.add(
				RateHistoryDB(
					base_currency=rate.base,
					target_currency=rate.target,
					rate=rate.rate,
					timestamp=_as_utc(rate.timestamp),
					provider=rate.provider,
				)
			)

	async def find_latest(self, base: str, target: str) -> ReconciledRate | None:
		stmt = (
			select(RateHistoryDB)
			.filter(
				RateHistoryDB.base_currency == base,
				RateHistoryDB.target_currency == target,
			)
			.order_by(RateHistoryDB.timestamp.desc(), RateHistoryDB.id.desc())
			.limit(1)
		)
		async with self.database.session() as session:
			row = (await session.execute(stmt)).scalars().first()
			return _to_domain(row) if row else None

	async def find_latest_for_base(self, base: str) -> list[ReconciledRate]:
		"""Most recent entry of every target recorded for ``base``."""
		latest = (
			select(
				RateHistoryDB.target_currency,
				func.max(RateHistoryDB.timestamp).label('latest_timestamp'),
			)
			.filter(RateHistoryDB.base_currency == base)
			.group_by(RateHistoryDB.target_currency)
			.subquery()
		)
		stmt = (
			select(RateHistoryDB)
			.join(
				latest,
				(RateHistoryDB.target_currency == latest.c.target_currency)
				& (RateHistoryDB.timestamp == latest.c.latest_timestamp),
			)
			.filter(RateHistoryDB.base_currency == base)
			.order_by(RateHistoryDB.target_currency, RateHistoryDB.id.desc())
		)
		async with self.database.session() as session:
			rows = (await session.execute(stmt)).scalars().all()

		by_target: dict[str, ReconciledRate] = {}
		for row in rows:
			# Duplicate timestamps keep the newest insert.
			by_target.setdefault(row.target_currency, _to_domain(row))
		return list(by_target.values())

	async def find_by_period(
		self, base: str, target: str, start: datetime, end: datetime
	) -> list[ReconciledRate]:
		stmt = (
			select(RateHistoryDB)
			.filter(
				RateHistoryDB.base_currency == base,
				RateHistoryDB.target_currency == target,
				RateHistoryDB.timestamp >= _as_utc(start),
				RateHistoryDB.timestamp <= _as_utc(end),
			)
			.order_by(RateHistoryDB.timestamp.asc(), RateHistoryDB.id.asc())
		)
		async with self.database.session() as session:
			rows = (await session.execute(stmt)).scalars().all()
			return [_to_domain(r) for r in rows]
