"""Database management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# Import models to register them with SQLModel metadata
from recallbot.infrastructure.persistence import models as _models  # noqa: F401
from recallbot.infrastructure.persistence.exceptions import DatabaseError
from recallbot.infrastructure.persistence.migrations import migrate_messages_fts

logger = logging.getLogger(__name__)


class DatabaseManager:
    """データベース管理

    SQLite アーカイブの初期化、エンジン生成、セッション管理を行う。
    aiosqlite を使用した非同期アクセスをサポート。
    """

    def __init__(self, database_path: str) -> None:
        """初期化

        Args:
            database_path: SQLite データベースファイルのパス
                          ":memory:" を指定するとインメモリDBを使用
        """
        self._database_path = database_path
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def get_engine(self) -> AsyncEngine:
        """SQLAlchemy 非同期エンジンを取得する

        エンジンは遅延初期化され、キャッシュされる。
        データベースファイルの親ディレクトリが存在しない場合は自動作成する。

        Returns:
            AsyncEngine インスタンス
        """
        if self._engine is not None:
            return self._engine

        if self._database_path != ":memory:":
            db_path = Path(self._database_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite+aiosqlite:///{self._database_path}"
        else:
            url = "sqlite+aiosqlite:///:memory:"

        self._engine = create_async_engine(url)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        return self._engine

    async def create_tables(self) -> None:
        """テーブルと全文検索インデックスを作成する

        既存のテーブルがある場合は何もしない。

        Raises:
            DatabaseError: スキーマの作成に失敗した場合
        """
        engine = self.get_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            await migrate_messages_fts(engine)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to initialize archive schema: {e}") from e

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """セッションを取得する（async context manager）

        Yields:
            AsyncSession インスタンス
        """
        self.get_engine()  # Ensures _session_factory is initialized
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    async def is_healthy(self) -> bool:
        """データベースに接続できるか確認する

        Returns:
            SELECT 1 が成功した場合 True
        """
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return False

    async def close(self) -> None:
        """エンジンを破棄する"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
