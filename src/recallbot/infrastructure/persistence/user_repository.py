"""SQLite implementation of UserRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import User, UserIdentity
from recallbot.infrastructure.persistence.models import UserModel, UserNicknameModel


class SQLiteUserRepository:
    """SQLite 版 UserRepository 実装

    ユーザー情報とギルド内ニックネームを管理する。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def save(self, user: User) -> None:
        """ユーザー情報を保存する（upsert）

        Args:
            user: 保存するユーザー
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(UserModel).where(UserModel.user_id == user.id)
            )
            existing = result.first()
            now = datetime.now(timezone.utc).replace(tzinfo=None)

            if existing:
                existing.name = user.name
                existing.display_name = user.display_name
                existing.is_bot = user.is_bot
                existing.updated_at = now
                session.add(existing)
            else:
                session.add(
                    UserModel(
                        user_id=user.id,
                        name=user.name,
                        display_name=user.display_name,
                        is_bot=user.is_bot,
                        updated_at=now,
                    )
                )

            await session.commit()

    async def find_by_id(self, user_id: str) -> User | None:
        """ID でユーザーを検索する

        Args:
            user_id: ユーザー ID

        Returns:
            ユーザー（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(UserModel).where(UserModel.user_id == user_id)
            )
            model = result.first()

            if model is None:
                return None

            return User(
                id=model.user_id,
                name=model.name,
                display_name=model.display_name,
                is_bot=model.is_bot,
            )

    async def add_nickname(self, user_id: str, guild_id: str, nickname: str) -> None:
        """ギルド内のニックネームを記録する

        Args:
            user_id: ユーザー ID
            guild_id: ギルド ID
            nickname: ニックネーム
        """
        nickname = nickname.strip()
        if not nickname:
            return

        async with self._session_factory() as session:
            result = await session.exec(
                select(UserNicknameModel).where(
                    UserNicknameModel.user_id == user_id,
                    UserNicknameModel.guild_id == guild_id,
                    UserNicknameModel.nickname == nickname,
                )
            )
            if result.first() is not None:
                return

            session.add(
                UserNicknameModel(user_id=user_id, guild_id=guild_id, nickname=nickname)
            )
            await session.commit()

    async def find_all_with_nicknames(self, guild_id: str) -> list[UserIdentity]:
        """ボット以外の全ユーザーをニックネーム付きで取得する

        ユーザーとニックネームをそれぞれ1回のクエリで取得して結合する。

        Args:
            guild_id: ニックネームを取得するギルド ID

        Returns:
            名前解決用の識別情報リスト
        """
        async with self._session_factory() as session:
            users = (
                await session.exec(
                    select(UserModel)
                    .where(col(UserModel.is_bot).is_(False))
                    .order_by(col(UserModel.id))
                )
            ).all()
            nickname_rows = (
                await session.exec(
                    select(UserNicknameModel)
                    .where(UserNicknameModel.guild_id == guild_id)
                    .order_by(col(UserNicknameModel.id))
                )
            ).all()

        nicknames: dict[str, list[str]] = {}
        for row in nickname_rows:
            nicknames.setdefault(row.user_id, []).append(row.nickname)

        return [
            UserIdentity(
                id=user.user_id,
                username=user.name,
                display_name=user.display_name,
                nicknames=tuple(nicknames.get(user.user_id, [])),
            )
            for user in users
        ]
