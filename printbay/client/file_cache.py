# printbay/client/file_cache.py

import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import defer

from printbay.config.settings import Settings, get_settings
from printbay.db.base_class import CacheBase
from printbay.db.session import build_async_engine, build_sessionmaker
from printbay.models import CachedFile
from printbay.schemas.files import CachedFileData, CachedFileMeta
from printbay.utils.hashing import generate_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class FileCache:
    """
    Local byte store for model files, keyed by a generated id.

    Entries older than `max_age` are swept by `cleanup_old_files` unless they
    were read within `recency`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        max_age: Optional[timedelta] = None,
        recency: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.url = url or settings.file_cache_url
        self.max_age = max_age or timedelta(hours=settings.file_cache_max_age_hours)
        self.recency = recency or timedelta(hours=settings.file_cache_recency_hours)
        self._clock = clock
        self._rng = rng
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        async with self._lock:
            if self._engine is not None:
                return
            engine = build_async_engine(self.url)
            async with engine.begin() as conn:
                await conn.run_sync(CacheBase.metadata.create_all)
            self._engine = engine
            self._sessionmaker = build_sessionmaker(engine)
            logger.info("🗂️ File cache ready")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    async def _session(self) -> AsyncSession:
        await self.init()
        return self._sessionmaker()

    @staticmethod
    def _meta(row: CachedFile) -> CachedFileMeta:
        return CachedFileMeta(
            id=row.id,
            name=row.name,
            size=row.size,
            type=row.type,
            uploaded_at=_aware(row.uploaded_at),
            last_accessed=_aware(row.last_accessed),
        )

    # ─── Write ────────────────────────────────────────────────

    async def store_file(self, name: str, data: bytes, content_type: str = "") -> str:
        file_id = generate_id("file", self._rng)
        now = self._clock()
        async with await self._session() as session:
            session.add(CachedFile(
                id=file_id,
                name=name,
                size=len(data),
                type=content_type,
                data=data,
                uploaded_at=now,
                last_accessed=now,
            ))
            await session.commit()
        logger.info("📁 Cached %s as %s (%d bytes)", name, file_id, len(data))
        return file_id

    async def remove_file(self, file_id: str) -> bool:
        async with await self._session() as session:
            result = await session.execute(delete(CachedFile).where(CachedFile.id == file_id))
            await session.commit()
        return result.rowcount > 0

    # ─── Read ─────────────────────────────────────────────────

    async def get_file(self, file_id: str) -> Optional[CachedFileData]:
        """Bytes plus metadata; bumps last accessed."""
        now = self._clock()
        async with await self._session() as session:
            row = await session.get(CachedFile, file_id)
            if row is None:
                return None
            row.last_accessed = now
            await session.commit()
            meta = self._meta(row)
            return CachedFileData(**meta.model_dump(), data=row.data)

    async def get_file_metadata(self, file_id: str) -> Optional[CachedFileMeta]:
        async with await self._session() as session:
            stmt = select(CachedFile).options(defer(CachedFile.data)).where(CachedFile.id == file_id)
            row = (await session.execute(stmt)).scalars().first()
        return self._meta(row) if row else None

    async def list_files(self) -> List[CachedFileMeta]:
        async with await self._session() as session:
            stmt = select(CachedFile).options(defer(CachedFile.data)).order_by(CachedFile.uploaded_at)
            rows = (await session.execute(stmt)).scalars().all()
        return [self._meta(r) for r in rows]

    async def has_file(self, file_id: str) -> bool:
        async with await self._session() as session:
            stmt = select(func.count()).select_from(CachedFile).where(CachedFile.id == file_id)
            return (await session.execute(stmt)).scalar_one() > 0

    async def get_cache_size(self) -> int:
        """Total cached bytes."""
        async with await self._session() as session:
            total = (await session.execute(select(func.coalesce(func.sum(CachedFile.size), 0)))).scalar_one()
        return int(total)

    # ─── Cleanup ──────────────────────────────────────────────

    async def cleanup_old_files(self) -> int:
        """
        Delete entries uploaded before now - max_age AND last read before
        now - recency. Returns how many were removed.
        """
        now = self._clock()
        old_cutoff = now - self.max_age
        recent_cutoff = now - self.recency

        stale = [
            meta.id
            for meta in await self.list_files()
            if meta.uploaded_at < old_cutoff and meta.last_accessed < recent_cutoff
        ]
        if not stale:
            return 0

        async with await self._session() as session:
            await session.execute(delete(CachedFile).where(CachedFile.id.in_(stale)))
            await session.commit()
        logger.info("🧹 Removed %d stale cached files", len(stale))
        return len(stale)
