import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from ideaboard.services.analyzer import compute_analysis
from ideaboard.services.novelty import novelty_badge
from ideaboard.services.types import AnalysisResult, Idea, NoveltyBadge

logger = logging.getLogger(__name__)

# A freshly submitted idea at or above this score is called out as a standout
STANDOUT_NOVELTY_THRESHOLD = 80
ID_PREFIX = "i"

_COUNTER_ID = re.compile(rf"^{ID_PREFIX}(\d+)$")


class IdeaBoardError(ValueError):
    pass


class EmptyIdeaError(IdeaBoardError):
    pass


class DuplicateIdeaError(IdeaBoardError):
    pass


@dataclass
class Submission:
    idea: Idea
    analysis: AnalysisResult
    novelty: Optional[int]
    badge: Optional[NoveltyBadge]
    is_standout: bool


class IdeaBoard:
    """
    Keeps the idea list for one problem statement and hands it to the analyzer.

    The board owns what the analysis engine leaves to its caller: it assigns
    ids ("i1", "i2", ...) and timestamps, fills in the author, and decides
    whether a new idea deserves to be celebrated. Analyses are always full
    recomputations over the current list.
    """

    def __init__(
        self,
        problem_statement: str = "",
        ideas: Iterable[Idea] = (),
        standout_threshold: int = STANDOUT_NOVELTY_THRESHOLD,
    ):
        self.problem_statement = problem_statement or ""
        self.standout_threshold = standout_threshold
        self.ideas: List[Idea] = []
        self._next_id = 1
        for idea in ideas:
            self._append(idea)

    def next_id(self) -> str:
        idea_id = f"{ID_PREFIX}{self._next_id}"
        self._next_id += 1
        return idea_id

    def add(
        self,
        text: Optional[str],
        author: Optional[str] = None,
        idea_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Idea:
        """Appends an idea without analyzing. Raises EmptyIdeaError for blank text."""
        if not text or not text.strip():
            raise EmptyIdeaError("Idea text must not be empty")
        idea = Idea(
            id=idea_id if idea_id is not None else self.next_id(),
            text=text,
            author=author,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._append(idea)
        return idea

    def analyze(self, include_similarity_matrix: bool = False) -> AnalysisResult:
        return compute_analysis(self.problem_statement, self.ideas, include_similarity_matrix)

    def submit(self, text: Optional[str], author: Optional[str] = None) -> Submission:
        """
        Adds a new idea and re-runs the full analysis with it included, so its
        score is directly comparable with everybody else's.
        """
        idea = self.add(text, author)
        analysis = self.analyze()
        score = analysis.novelty_by_id.get(idea.id)
        is_standout = score is not None and score >= self.standout_threshold
        if is_standout:
            logger.info("Idea %s is a standout with novelty %d", idea.id, score)
        return Submission(
            idea=idea,
            analysis=analysis,
            novelty=score,
            badge=novelty_badge(score) if score is not None else None,
            is_standout=is_standout,
        )

    def reserve_ids(self, idea_ids: Iterable[str]) -> None:
        """Keeps generated ids ahead of ids the caller already uses."""
        for idea_id in idea_ids:
            match = _COUNTER_ID.match(idea_id)
            if match:
                self._next_id = max(self._next_id, int(match.group(1)) + 1)

    def _append(self, idea: Idea) -> None:
        if any(existing.id == idea.id for existing in self.ideas):
            raise DuplicateIdeaError(f"Duplicate idea id: {idea.id}")
        self.ideas.append(idea)
        self.reserve_ids([idea.id])


def sorted_by_novelty(ideas: Iterable[Idea], novelty_by_id: Dict[str, int]) -> List[Idea]:
    """All ideas, highest novelty first. Ideas without a score count as 0."""
    return sorted(ideas, key=lambda idea: novelty_by_id.get(idea.id, 0), reverse=True)
