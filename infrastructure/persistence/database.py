import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from tenacity import (
	before_sleep_log,
	retry,
	retry_if_exception_type,
	stop_after_attempt,
	wait_exponential,
)

from infrastructure.persistence.models.currency import Base

logger = logging.getLogger(__name__)


class Database:
	def __init__(self, db_url: str):
		self.engine = create_async_engine(db_url)
		self.session_factory = async_sessionmaker(
			self.engine,
			class_=AsyncSession,
			autoflush=True,
			expire_on_commit=False,
		)

	@retry(
		stop=stop_after_attempt(5),
		wait=wait_exponential(multiplier=1, min=1, max=10),
		retry=retry_if_exception_type(OperationalError),
		before_sleep=before_sleep_log(logger, logging.WARNING),
		reraise=True,
	)
	async def create_tables(self) -> None:
		async with self.engine.begin() as conn:
			await conn.run_sync(Base.metadata.create_all)

	async def drop_tables(self) -> None:
		async with self.engine.begin() as conn:
			await conn.run_sync(Base.metadata.drop_all)

	async def close(self) -> None:
		await self.engine.dispose()

	async def health_check(self) -> bool:
		try:
			async with self.session() as session:
				await session.execute(text('SELECT 1'))
			return True
		except Exception as e:
			logger.warning(f'Database health check failed: {e}')
			return False

	@asynccontextmanager
	async def session(self) -> AsyncGenerator[AsyncSession, None]:
		async with self.session_factory() as session:
			try:
				yield session
				await session.commit()
			except Exception:
				await session.rollback()
				raise
