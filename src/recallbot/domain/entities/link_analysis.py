"""Link analysis entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LinkAnalysis:
    """A URL shared in the archive together with its analyzed summary.

    Attributes:
        url: Shared URL.
        guild_id: Workspace the link was shared in.
        channel_id: Channel the link was shared in.
        author_id: User who shared the link.
        message_id: Message that contained the link.
        title: Page title, if fetched.
        summary: Short summary of the page, if analyzed.
        created_at: When the link was recorded.
    """

    url: str
    guild_id: str
    channel_id: str
    author_id: str
    message_id: str
    title: str | None
    summary: str | None
    created_at: datetime
