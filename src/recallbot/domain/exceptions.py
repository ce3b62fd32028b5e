"""Domain exceptions."""


class ChannelNotAccessibleError(Exception):
    """返信先のチャンネルに投稿できない場合の例外

    ボットがチャンネルから外された、チャンネルがアーカイブされた等で
    発生する。呼び出し側はログを残して処理を打ち切る。
    """

    def __init__(self, channel_id: str, message: str = "") -> None:
        self.channel_id = channel_id
        super().__init__(message or f"Channel {channel_id} is not accessible")
