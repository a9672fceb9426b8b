"""Unit tests for the sensitivity classifier."""

import random

import pytest

from src.application.services.sensitivity_classifier import (
    LARGE_FILE_REASON,
    RANDOM_FLAG_REASON,
    SensitivityClassifier,
    round_half_up,
)
from src.commons.settings.models import ClassifierSettings
from src.domain.models.sensitivity import (
    DEFAULT_SAFE_REASON,
    AnalysisMethod,
    ModerationFinding,
    SensitivityStatus,
)


class FixedRandom(random.Random):
    """Random source replaying a fixed sequence of draws."""

    def __init__(self, *values: float) -> None:
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


MB = 1024 * 1024


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_rounds_half_up_not_to_even(self):
        assert round_half_up(90.5) == 91
        assert round_half_up(2.5) == 3
        assert round(2.5) == 2

    def test_rounds_down_below_half(self):
        assert round_half_up(91.2) == 91


class TestClassifyWithFindings:
    """Verdicts derived from moderation findings."""

    @pytest.fixture
    def classifier(self):
        return SensitivityClassifier(ClassifierSettings(), FixedRandom())

    def test_same_category_findings_produce_one_reason(self, classifier):
        """Two findings under one parent collapse into a single reason."""
        findings = [
            ModerationFinding(
                label="Graphic Male Nudity",
                parent_category="Explicit Nudity",
                confidence=91.2,
            ),
            ModerationFinding(
                label="Graphic Female Nudity",
                parent_category="Explicit Nudity",
                confidence=76.0,
            ),
        ]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert result.status == SensitivityStatus.FLAGGED
        assert result.confidence == 0.91
        assert result.analysis_method == AnalysisMethod.EXTERNAL_MODERATION
        assert result.reasons == [
            "Detected Explicit Nudity (Graphic Male Nudity, Graphic Female Nudity)"
            " - 91% confidence"
        ]

    def test_groups_keep_first_seen_order(self, classifier):
        findings = [
            ModerationFinding(
                label="Weapons", parent_category="Violence", confidence=80
            ),
            ModerationFinding(
                label="Smoking", parent_category="Tobacco", confidence=95
            ),
        ]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert [r.split(" (")[0] for r in result.reasons] == [
            "Detected Violence",
            "Detected Tobacco",
        ]
        assert result.confidence == 0.95

    def test_top_level_label_is_its_own_category(self, classifier):
        """A finding without parent groups under its label."""
        findings = [ModerationFinding(label="Violence", confidence=88.4)]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert result.reasons == ["Detected Violence (Violence) - 88% confidence"]

    def test_later_label_equal_to_category_is_not_an_example(self, classifier):
        findings = [
            ModerationFinding(
                label="Weapons", parent_category="Violence", confidence=70
            ),
            ModerationFinding(label="Violence", confidence=99),
        ]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert result.reasons == ["Detected Violence (Weapons) - 70% confidence"]

    def test_at_most_two_examples_per_reason(self, classifier):
        findings = [
            ModerationFinding(label=label, parent_category="Violence", confidence=75)
            for label in ("Weapons", "Graphic Violence", "Self Injury")
        ]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert result.reasons == [
            "Detected Violence (Weapons, Graphic Violence) - 75% confidence"
        ]

    def test_confidence_rounds_half_up(self, classifier):
        findings = [ModerationFinding(label="Gambling", confidence=90.5)]

        result = classifier.classify("clip.mp4", "", 0, findings)

        assert result.confidence == 0.91

    def test_findings_ignore_keywords_and_randomness(self):
        """Findings make the verdict deterministic."""
        classifier = SensitivityClassifier(ClassifierSettings())
        findings = [ModerationFinding(label="Drugs", confidence=72.0)]

        results = {
            classifier.classify("violence.mp4", "", 500 * MB, findings).confidence
            for _ in range(20)
        }

        assert results == {0.72}


class TestClassifyHeuristics:
    """Verdicts without moderation findings."""

    def test_keyword_in_file_name_flags(self):
        classifier = SensitivityClassifier(ClassifierSettings(), FixedRandom(0.5))

        result = classifier.classify("training_violence_demo.mp4", "", 10 * MB, [])

        assert result.status == SensitivityStatus.FLAGGED
        assert result.reasons == ["Content may contain: violence"]
        assert result.analysis_method == AnalysisMethod.HEURISTIC_FALLBACK
        assert 0.75 <= result.confidence <= 0.95

    def test_keyword_match_is_case_insensitive_and_checks_title(self):
        classifier = SensitivityClassifier(ClassifierSettings(), FixedRandom(0.0))

        result = classifier.classify("clip.mp4", "Weapon Safety NSFW", 0, [])

        assert result.reasons == [
            "Content may contain: nsfw",
            "Content may contain: weapon",
        ]

    def test_each_keyword_reported_once(self):
        settings = ClassifierSettings(keywords=["gore", "gore"])
        classifier = SensitivityClassifier(settings, FixedRandom(0.0))

        result = classifier.classify("gore_gore.mp4", "gore", 0, [])

        assert result.reasons == ["Content may contain: gore"]

    def test_keyword_match_skips_random_draws(self):
        """Only the confidence draw is consumed when a keyword matched."""
        rng = FixedRandom(0.0)
        classifier = SensitivityClassifier(ClassifierSettings(), rng)

        result = classifier.classify("explicit.mp4", "", 500 * MB, [])

        assert result.confidence == 0.75
        assert rng._values == []

    def test_clean_small_file_is_safe(self):
        classifier = SensitivityClassifier(ClassifierSettings(), FixedRandom(0.5, 0.5))

        result = classifier.classify("team_standup.mp4", "", 10 * MB, [])

        assert result.status == SensitivityStatus.SAFE
        assert result.reasons == [DEFAULT_SAFE_REASON]
        assert result.confidence == 0.92

    def test_random_flag(self):
        classifier = SensitivityClassifier(ClassifierSettings(), FixedRandom(0.05, 1.0))

        result = classifier.classify("team_standup.mp4", "", 10 * MB, [])

        assert result.status == SensitivityStatus.FLAGGED
        assert result.reasons == [RANDOM_FLAG_REASON]
        assert result.confidence == 0.95

    def test_large_file_flag(self):
        classifier = SensitivityClassifier(
            ClassifierSettings(),
            FixedRandom(0.5, 0.1, 0.0),
        )

        result = classifier.classify("team_standup.mp4", "", 101 * MB, [])

        assert result.reasons == [LARGE_FILE_REASON]
        assert result.confidence == 0.75

    def test_file_at_threshold_is_not_large(self):
        rng = FixedRandom(0.5, 0.0)
        classifier = SensitivityClassifier(ClassifierSettings(), rng)

        result = classifier.classify("team_standup.mp4", "", 100 * MB, [])

        assert result.status == SensitivityStatus.SAFE
        assert rng._values == []

    def test_zero_probabilities_never_flag(self):
        settings = ClassifierSettings(
            random_flag_probability=0,
            large_file_flag_probability=0,
        )
        classifier = SensitivityClassifier(settings, random.Random(11))

        statuses = {
            classifier.classify("team_standup.mp4", "", 500 * MB, []).status
            for _ in range(50)
        }

        assert statuses == {SensitivityStatus.SAFE}

    def test_confidence_stays_in_configured_ranges(self):
        classifier = SensitivityClassifier(ClassifierSettings(), random.Random(5))

        for _ in range(200):
            result = classifier.classify("team_standup.mp4", "", 500 * MB, [])
            low, high = (0.75, 0.95) if result.is_flagged else (0.85, 0.99)
            assert low <= result.confidence <= high
            assert result.confidence == round(result.confidence, 2)
