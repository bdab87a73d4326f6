"""Similarity-based recommendation scoring"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import structlog

from navigator.core.search.records import VideoRecord

logger = structlog.get_logger()

DEFAULT_RECOMMENDATION_LIMIT = 6


@dataclass(frozen=True)
class ScoringWeights:
    """Points awarded per matching attribute"""
    brawler: float = 3.0
    game_mode: float = 2.0
    content_type: float = 1.0
    same_creator: float = 4.0
    preferred_brawler: float = 1.0

    # Multipliers for the pre-normalized [0, 1] metrics
    popularity: float = 5.0
    recency: float = 3.0


@dataclass(frozen=True)
class RankedResult:
    """A candidate video with the scores used to order it"""
    video: VideoRecord
    similarity_score: float
    final_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.video.to_dict(),
            "similarity_score": self.similarity_score,
            "final_score": self.final_score,
        }


def _overlap(left: Iterable[str], right: Iterable[str]) -> int:
    return len(set(left) & set(right))


class RecommendationScorer:
    """
    Ranks candidate videos by similarity to a source video.

    Scoring Formula:
        similarity = 3 * shared brawlers + 2 * shared game modes
                   + 1 * shared content types + 4 if same creator
                   + 1 * candidate brawlers the user prefers
        final = similarity + 5 * popularity + 3 * recency

    Ties on the final score go to the more recently published video.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def similarity_score(
        self,
        source: VideoRecord,
        candidate: VideoRecord,
        preferred_brawlers: Iterable[str] = (),
    ) -> float:
        w = self.weights
        score = (
            w.brawler * _overlap(candidate.brawlers, source.brawlers) +
            w.game_mode * _overlap(candidate.game_modes, source.game_modes) +
            w.content_type * _overlap(candidate.content_types, source.content_types)
        )

        if source.creator.id and candidate.creator.id == source.creator.id:
            score += w.same_creator

        preferred = [b for b in preferred_brawlers or () if b]
        if preferred:
            score += w.preferred_brawler * _overlap(candidate.brawlers, preferred)

        return score

    def final_score(self, similarity: float, candidate: VideoRecord) -> float:
        return (
            similarity +
            self.weights.popularity * candidate.popularity +
            self.weights.recency * candidate.recency
        )

    def rank(
        self,
        source: VideoRecord,
        candidates: Iterable[VideoRecord],
        preferred_brawlers: Optional[Iterable[str]] = None,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    ) -> List[RankedResult]:
        """
        Score and order candidates, best first.

        The source video is skipped if it appears among the candidates.
        A limit below 1 falls back to the default limit.
        """
        if limit < 1:
            limit = DEFAULT_RECOMMENDATION_LIMIT
        preferred = tuple(preferred_brawlers or ())

        ranked = []
        for candidate in candidates:
            if candidate.youtube_id == source.youtube_id:
                continue
            similarity = self.similarity_score(source, candidate, preferred)
            ranked.append(RankedResult(
                video=candidate,
                similarity_score=similarity,
                final_score=self.final_score(similarity, candidate),
            ))

        ranked.sort(
            key=lambda r: (r.final_score, r.video.published_at.timestamp()),
            reverse=True,
        )

        logger.debug(
            "Ranked recommendation candidates",
            source=source.youtube_id,
            candidates=len(ranked),
            limit=limit,
        )

        return ranked[:limit]
