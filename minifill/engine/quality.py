"""Quality scoring used to accept or reject complete fills."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Optional

from ..data.dictionary import WordIndex

BASE_SCORE = 100
TWO_LETTER_PENALTY = 30
THREE_LETTER_BONUS = 10
LONG_WORD_BONUS = 20
PER_WORD_BONUS = 5


@dataclass(frozen=True)
class QualityPolicy:
    """Acceptance thresholds for a scored fill."""

    min_score: int = 0
    max_two_letter: int = 4

    def accepts(self, report: "QualityReport") -> bool:
        return report.score >= self.min_score and report.two_letter_words <= self.max_two_letter


@dataclass
class QualityReport:
    score: int
    two_letter_words: int
    three_letter_words: int
    four_plus_words: int
    total_words: int
    average_word_score: float
    block_count: int = 0
    acceptable: bool = True

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _average_adjustment(average: float, total: int) -> int:
    if total == 0:
        return 0
    if average >= 50:
        return 20
    if average >= 30:
        return 10
    if average < 15:
        return -20
    return 0


def score_quality(
    words: Iterable[str],
    index: WordIndex,
    policy: Optional[QualityPolicy] = None,
    block_count: int = 0,
) -> QualityReport:
    """Score a set of placed words.

    Short words cost points, longer ones earn them, and the mean dictionary
    score moves the total up or down. Words missing from ``index`` count as 0.
    """

    words = [word.upper() for word in words]
    two = sum(1 for word in words if len(word) == 2)
    three = sum(1 for word in words if len(word) == 3)
    four_plus = sum(1 for word in words if len(word) >= 4)
    total = len(words)
    average = sum(index.score(word) for word in words) / total if total else 0.0

    score = (
        BASE_SCORE
        - TWO_LETTER_PENALTY * two
        + THREE_LETTER_BONUS * three
        + LONG_WORD_BONUS * four_plus
        + PER_WORD_BONUS * total
        + _average_adjustment(average, total)
    )
    report = QualityReport(
        score=score,
        two_letter_words=two,
        three_letter_words=three,
        four_plus_words=four_plus,
        total_words=total,
        average_word_score=round(average, 1),
        block_count=block_count,
    )
    report.acceptable = (policy or QualityPolicy()).accepts(report)
    return report


__all__ = ["QualityPolicy", "QualityReport", "score_quality"]
