"""User entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class User:
    """User entity (platform-independent).

    Attributes:
        id: Platform-specific user ID.
        name: Account name (handle).
        display_name: Display name chosen by the user, if any.
        is_bot: Whether the user is a bot.
    """

    id: str
    name: str
    display_name: str | None = None
    is_bot: bool = False

    @property
    def label(self) -> str:
        """Name to show in prompts: display name first, then account name."""
        return self.display_name or self.name


@dataclass(frozen=True)
class UserIdentity:
    """ユーザーの名前解決用の識別情報

    質問文中の自由記述の名前（アカウント名・表示名・ニックネーム）を
    保存済みユーザーに対応付けるために使う。

    Attributes:
        id: ユーザー ID
        username: アカウント名
        display_name: 表示名
        nicknames: ギルド内で記録されたニックネーム
    """

    id: str
    username: str
    display_name: str | None = None
    nicknames: tuple[str, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        """表示用の名前"""
        return self.display_name or self.username

    def is_named_in(self, text: str) -> bool:
        """テキスト中にこのユーザーの名前が含まれるか判定する

        大文字小文字を区別しない部分一致。

        Args:
            text: 判定対象のテキスト

        Returns:
            アカウント名・表示名・ニックネームのいずれかを含む場合 True
        """
        lowered = text.lower()
        names = [self.username, self.display_name, *self.nicknames]
        return any(name and name.lower() in lowered for name in names)
