"""Domain services."""

from recallbot.domain.services.mode_classifier import (
    RECALL_PATTERNS,
    classify_mode,
    strip_recall_phrasing,
)
from recallbot.domain.services.protocols import (
    AnswerGenerator,
    ContinuationClassifier,
    MessagingService,
    ProfileAnalyzer,
)

__all__ = [
    "AnswerGenerator",
    "ContinuationClassifier",
    "MessagingService",
    "ProfileAnalyzer",
    "RECALL_PATTERNS",
    "classify_mode",
    "strip_recall_phrasing",
]
