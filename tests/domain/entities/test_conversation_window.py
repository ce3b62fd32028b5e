"""Tests for ConversationWindow."""

from recallbot.domain.entities import (
    ConversationTurn,
    ConversationWindow,
    TurnRole,
    window_key,
)


def create_window(created_at: float = 0.0) -> ConversationWindow:
    """Create a window opened at the given time."""
    return ConversationWindow(
        channel_id="C1",
        user_id="U1",
        original_question="who won?",
        original_answer="alice did",
        created_at=created_at,
        last_activity_at=created_at,
        history=[
            ConversationTurn(TurnRole.ASKER, "who won?"),
            ConversationTurn(TurnRole.ASSISTANT, "alice did"),
        ],
    )


class TestWindowKey:
    """window_key tests."""

    def test_format(self) -> None:
        """Key joins channel and user."""
        assert window_key("C1", "U1") == "C1:U1"
        assert create_window().key == "C1:U1"


class TestExpiry:
    """Expiry and exhaustion tests."""

    def test_not_expired_at_exact_ttl(self) -> None:
        """Idle time equal to the TTL is still open."""
        window = create_window()
        assert not window.is_expired(120.0, 120)

    def test_expired_after_ttl(self) -> None:
        """Idle time beyond the TTL expires the window."""
        window = create_window()
        assert window.is_expired(120.5, 120)

    def test_exhausted_at_max(self) -> None:
        """Window is exhausted once the count reaches the maximum."""
        window = create_window()
        window.follow_up_count = 3
        assert window.is_exhausted(3)
        assert not window.is_exhausted(4)


class TestCooldown:
    """Cooldown tests."""

    def test_never_classified(self) -> None:
        """A window never classified is not in cooldown."""
        assert not create_window().in_cooldown(0.0, 5.0)

    def test_within_interval(self) -> None:
        """A recent classification puts the window in cooldown."""
        window = create_window()
        window.last_classified_at = 10.0
        assert window.in_cooldown(12.0, 5.0)
        assert not window.in_cooldown(15.0, 5.0)


class TestHistory:
    """History mutation tests."""

    def test_accept_and_record(self) -> None:
        """Accepted follow-ups and answers are appended in order."""
        window = create_window()

        window.accept_follow_up("and second place?", 30.0)
        window.record_answer("bob", 31.0)

        assert window.follow_up_count == 1
        assert window.last_activity_at == 31.0
        assert [turn.role for turn in window.history] == [
            TurnRole.ASKER,
            TurnRole.ASSISTANT,
            TurnRole.ASKER,
            TurnRole.ASSISTANT,
        ]
        assert window.history[-2].content == "and second place?"

    def test_recent_turns(self) -> None:
        """recent_turns returns the tail of the history."""
        window = create_window()
        window.accept_follow_up("third", 1.0)

        assert [t.content for t in window.recent_turns(2)] == ["alice did", "third"]
        assert window.recent_turns(0) == []
        assert len(window.recent_turns(10)) == 3
