"""Unit tests for winner selection gates."""
import math

from ecoscore.models.catalog import ValidationThresholds
from ecoscore.models.scoring import ClassificationOutcome, Confidence, UnresolvedReason
from ecoscore.services.catalog import load_catalog
from ecoscore.services.classification import ScoredCategory, select_winner
from ecoscore.services.classification.exclusions import apply_exclusions
from ecoscore.services.classification.scorer import CategoryScore
from ecoscore.services.classification.selector import confidence_ratio


def _scored(category, score, exclusions=None):
    return ScoredCategory(
        category=category,
        raw_score=score,
        adjusted_score=score,
        exclusions_found=exclusions or [],
    )


class TestSelectWinner:
    """Test select_winner()."""

    def test_no_categories(self):
        result = select_winner([], ValidationThresholds())

        assert result.outcome == ClassificationOutcome.UNRESOLVED
        assert result.reason == UnresolvedReason.NO_CATEGORIES
        assert result.best_candidate is None

    def test_clear_winner_is_medium_confidence(self):
        result = select_winner([_scored("a", 3.0), _scored("b", 6.0)], ValidationThresholds())

        assert result.is_resolved
        assert result.category_id == "b"
        assert result.confidence == Confidence.MEDIUM
        assert result.ratio == 2.0
        assert result.ranking == [("b", 6.0), ("a", 3.0)]

    def test_close_runner_up_is_low_confidence(self):
        result = select_winner([_scored("a", 4.0), _scored("b", 3.0)], ValidationThresholds())

        assert result.category_id == "a"
        assert result.confidence == Confidence.LOW
        assert not result.is_confident

    def test_ratio_exactly_at_threshold_is_medium(self):
        result = select_winner([_scored("a", 3.0), _scored("b", 2.0)], ValidationThresholds())

        assert result.ratio == 1.5
        assert result.confidence == Confidence.MEDIUM

    def test_tie_keeps_input_order_and_is_low(self):
        """Equal scores: the earlier category wins with ratio 1.0."""
        result = select_winner([_scored("a", 3.0), _scored("b", 3.0)], ValidationThresholds())

        assert result.category_id == "a"
        assert result.ratio == 1.0
        assert result.confidence == Confidence.LOW

    def test_single_positive_score_has_infinite_ratio(self):
        result = select_winner([_scored("a", 2.0), _scored("b", 0.0)], ValidationThresholds())

        assert result.category_id == "a"
        assert math.isinf(result.ratio)
        assert result.confidence == Confidence.MEDIUM

    def test_score_exactly_minimum_resolves(self):
        result = select_winner([_scored("a", 2.0)], ValidationThresholds(minimum_score=2.0))

        assert result.is_resolved

    def test_below_minimum_is_insufficient_evidence(self):
        result = select_winner([_scored("a", 1.0), _scored("b", 0.0)], ValidationThresholds())

        assert not result.is_resolved
        assert result.reason == UnresolvedReason.INSUFFICIENT_EVIDENCE
        assert result.best_candidate == "a"
        assert result.score == 1.0
        assert result.category_id is None
        assert result.confidence is None

    def test_excluded_winner_is_vetoed(self):
        """A recorded exclusion vetoes the top category whatever its score."""
        scored = [_scored("a", 9.0, exclusions=["toy"]), _scored("b", 3.0)]

        result = select_winner(scored, ValidationThresholds(exclusion_penalty=0.0))

        assert result.reason == UnresolvedReason.EXCLUDED_WINNER
        assert result.best_candidate == "a"

    def test_custom_confidence_ratio(self):
        thresholds = ValidationThresholds(confidence_ratio=1.2)

        result = select_winner([_scored("a", 4.0), _scored("b", 3.0)], thresholds)

        assert result.confidence == Confidence.MEDIUM


class TestConfidenceRatio:
    def test_positive_runner_up(self):
        assert confidence_ratio(6.0, 3.0) == 2.0

    def test_zero_or_negative_runner_up(self):
        assert math.isinf(confidence_ratio(3.0, 0.0))
        assert math.isinf(confidence_ratio(3.0, -997.0))


class TestMinimumScoreGate:
    def test_every_category_below_minimum_is_unresolved(self):
        thresholds = ValidationThresholds(minimum_score=30)
        scored = [_scored("a", 29.0), _scored("b", 12.0), _scored("c", 0.0)]

        result = select_winner(scored, thresholds)

        assert not result.is_resolved
        assert result.reason == UnresolvedReason.INSUFFICIENT_EVIDENCE
        assert result.best_candidate == "a"
        assert result.score == 29.0


class TestExcludedCategoryFallsThrough:
    """An excluded category sinks below the next qualifying category."""

    def test_toy_car_is_not_automotive(self):
        catalog = load_catalog()
        thresholds = catalog.scoring.validation_thresholds
        scores = [
            CategoryScore(category="automotive", raw_score=40.0),
            CategoryScore(category="toys_games", raw_score=6.0),
            CategoryScore(category="electronics", raw_score=0.0),
        ]

        scored = apply_exclusions(scores, "Hot Wheels Toy Car", catalog, thresholds.exclusion_penalty)
        result = select_winner(scored, thresholds)

        assert scored[0].exclusions_found == ["toy"]
        assert scored[0].adjusted_score == 40.0 + thresholds.exclusion_penalty
        assert result.is_resolved
        assert result.category_id == "toys_games"
        assert [category for category, _ in result.ranking] == ["toys_games", "automotive", "electronics"]
