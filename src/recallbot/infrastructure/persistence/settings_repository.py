"""SQLite implementation of SettingsRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.infrastructure.persistence.models import SettingModel


class SQLiteSettingsRepository:
    """SQLite 版 SettingsRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            model = await session.get(SettingModel, key)
            return model.value if model is not None else None

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            model = await session.get(SettingModel, key)
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            if model is None:
                model = SettingModel(key=key, value=value, updated_at=now)
            else:
                model.value = value
                model.updated_at = now
            session.add(model)
            await session.commit()

    async def delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            model = await session.get(SettingModel, key)
            if model is None:
                return False
            await session.delete(model)
            await session.commit()
            return True

    async def get_all(self) -> dict[str, str]:
        async with self._session_factory() as session:
            result = await session.exec(select(SettingModel))
            return {m.key: m.value for m in result.all()}
