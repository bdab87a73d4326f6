"""Tests for recommendation scoring"""

from navigator.core.search.scorer import RecommendationScorer, ScoringWeights


class TestSimilarity:
    """Test the similarity formula"""

    def test_identical_candidate_same_creator_scores_ten(self, video_factory):
        """Test 3 + 2 + 1 + 4 for one shared brawler, mode, type and the same creator"""
        source = video_factory(
            "src", brawlers=["Mortis"], game_modes=["Brawl Ball"], content_types=["tutorial"], creator_id="UC1"
        )
        twin = video_factory(
            "twin", brawlers=["Mortis"], game_modes=["Brawl Ball"], content_types=["tutorial"], creator_id="UC1"
        )

        assert RecommendationScorer().similarity_score(source, twin) == 10

    def test_preferred_brawlers_add_one_each(self, video_factory):
        source = video_factory("src", creator_id="UC1")
        candidate = video_factory("c", brawlers=["Shelly", "Colt"], creator_id="UC2")

        scorer = RecommendationScorer()
        assert scorer.similarity_score(source, candidate) == 0
        assert scorer.similarity_score(source, candidate, ["Shelly", "Colt", "Bo"]) == 2

    def test_empty_creator_id_is_not_a_match(self, video_factory):
        source = video_factory("src", creator_id="")
        candidate = video_factory("c", creator_id="")
        assert RecommendationScorer().similarity_score(source, candidate) == 0

    def test_final_score_adds_popularity_and_recency(self, video_factory):
        candidate = video_factory("c", popularity=0.5, recency=1.0)
        assert RecommendationScorer().final_score(2.0, candidate) == 2.0 + 2.5 + 3.0

    def test_custom_weights(self, video_factory):
        scorer = RecommendationScorer(ScoringWeights(brawler=10.0))
        source = video_factory("src", brawlers=["Bo"], creator_id="UC1")
        candidate = video_factory("c", brawlers=["Bo"], creator_id="UC2")
        assert scorer.similarity_score(source, candidate) == 10.0


class TestRank:
    """Test candidate ordering"""

    def test_best_match_first_and_source_excluded(self, catalogue):
        source = catalogue[0]
        ranked = RecommendationScorer().rank(source, catalogue)

        ids = [r.video.youtube_id for r in ranked]
        assert source.youtube_id not in ids
        assert ids[0] == "mortis2"

    def test_idempotent(self, catalogue):
        """Test that scoring twice gives the same order and scores"""
        scorer = RecommendationScorer()
        first = scorer.rank(catalogue[0], catalogue, ["Shelly"])
        second = scorer.rank(catalogue[0], catalogue, ["Shelly"])

        assert [r.video.youtube_id for r in first] == [r.video.youtube_id for r in second]
        assert [r.final_score for r in first] == [r.final_score for r in second]

    def test_ties_go_to_most_recent(self, video_factory):
        source = video_factory("src", creator_id="UC0")
        older = video_factory("old", creator_id="UC1", days_ago=10)
        newer = video_factory("new", creator_id="UC2", days_ago=1)

        ranked = RecommendationScorer().rank(source, [older, newer])
        assert [r.video.youtube_id for r in ranked] == ["new", "old"]

    def test_limit_and_default(self, video_factory):
        source = video_factory("src")
        candidates = [video_factory(f"v{i}", creator_id=f"UC{i}") for i in range(10)]
        scorer = RecommendationScorer()

        assert len(scorer.rank(source, candidates)) == 6
        assert len(scorer.rank(source, candidates, limit=3)) == 3
        assert len(scorer.rank(source, candidates, limit=0)) == 6

    def test_empty_candidates(self, video_factory):
        assert RecommendationScorer().rank(video_factory("src"), []) == []

    def test_to_dict_carries_scores(self, catalogue):
        result = RecommendationScorer().rank(catalogue[0], catalogue)[0].to_dict()
        assert result["youtube_id"] == "mortis2"
        assert result["similarity_score"] == 3
        assert "final_score" in result
