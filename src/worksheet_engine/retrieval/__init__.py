from .similarity import ScoreBreakdown, SimilarityMatch, SimilarityRanker, rank_similar, score_pair

__all__ = ["ScoreBreakdown", "SimilarityMatch", "SimilarityRanker", "rank_similar", "score_pair"]
