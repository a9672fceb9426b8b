"""Reduction of moderation findings or heuristics to a single verdict."""

import math
import random
from dataclasses import dataclass, field

from src.commons.settings.models import ClassifierSettings
from src.domain.models.sensitivity import (
    AnalysisMethod,
    ModerationFinding,
    SensitivityResult,
    SensitivityStatus,
)

RANDOM_FLAG_REASON = "Automated content analysis detected potential concerns"
LARGE_FILE_REASON = "Extended content requires additional review"
MAX_EXAMPLES_PER_REASON = 2


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, unlike ``round``."""
    return math.floor(value + 0.5)


@dataclass
class _CategoryGroup:
    name: str
    confidence: float
    examples: list[str] = field(default_factory=list)

    def reason(self) -> str:
        examples = ", ".join(self.examples[:MAX_EXAMPLES_PER_REASON])
        detail = f" ({examples})" if examples else ""
        return (
            f"Detected {self.name}{detail} - "
            f"{round_half_up(self.confidence)}% confidence"
        )


class SensitivityClassifier:
    """Classifies a video as safe or flagged.

    With moderation findings the verdict is always ``flagged`` and fully
    deterministic. Without findings it falls back to keyword matching on the
    file name and title, then to two probabilistic heuristics. All randomness
    comes from the injected ``random.Random`` so tests can pin outcomes.

    Example:
        >>> classifier = SensitivityClassifier(ClassifierSettings(), random.Random(7))
        >>> classifier.classify("training_violence_demo.mp4", "", 0, []).status
        <SensitivityStatus.FLAGGED: 'flagged'>
    """

    def __init__(
        self,
        settings: ClassifierSettings,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._rng = rng or random.Random(settings.seed)
        self._keywords = [k.lower() for k in settings.keywords]

    def classify(
        self,
        original_name: str,
        title: str,
        size_bytes: int,
        findings: list[ModerationFinding],
    ) -> SensitivityResult:
        if findings:
            return self._from_findings(findings)
        return self._from_heuristics(original_name, title, size_bytes)

    def _from_findings(self, findings: list[ModerationFinding]) -> SensitivityResult:
        groups: dict[str, _CategoryGroup] = {}
        for finding in findings:
            category = finding.category
            group = groups.get(category)
            if group is None:
                # A group keeps the confidence of its first-seen finding
                groups[category] = _CategoryGroup(
                    name=category,
                    confidence=finding.confidence,
                    examples=[finding.label],
                )
            elif finding.label != category:
                group.examples.append(finding.label)

        top = max(f.confidence for f in findings)
        return SensitivityResult(
            status=SensitivityStatus.FLAGGED,
            confidence=round_half_up(top) / 100,
            reasons=[group.reason() for group in groups.values()],
            analysis_method=AnalysisMethod.EXTERNAL_MODERATION,
        )

    def _from_heuristics(
        self,
        original_name: str,
        title: str,
        size_bytes: int,
    ) -> SensitivityResult:
        text = f"{original_name} {title}".lower()
        reasons: list[str] = []
        for keyword in dict.fromkeys(self._keywords):
            if keyword in text:
                reasons.append(f"Content may contain: {keyword}")

        settings = self._settings
        if not reasons and self._rng.random() < settings.random_flag_probability:
            reasons.append(RANDOM_FLAG_REASON)

        if (
            not reasons
            and size_bytes > settings.large_file_threshold_bytes
            and self._rng.random() < settings.large_file_flag_probability
        ):
            reasons.append(LARGE_FILE_REASON)

        flagged = bool(reasons)
        low, high = (
            settings.flagged_confidence_range
            if flagged
            else settings.safe_confidence_range
        )
        confidence = low + self._rng.random() * (high - low)

        return SensitivityResult(
            status=SensitivityStatus.FLAGGED if flagged else SensitivityStatus.SAFE,
            confidence=round_half_up(confidence * 100) / 100,
            reasons=reasons,
            analysis_method=AnalysisMethod.HEURISTIC_FALLBACK,
        )
