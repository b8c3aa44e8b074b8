from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from gpapredictor.config.settings import settings

logger = logging.getLogger(__name__)

PENDING = "Pending"
INCOMPLETE = "Incomplete"


class GradeError(Exception):
    pass


class ConfigurationError(GradeError):
    pass


class OutOfRangeError(GradeError):
    pass


class SubjectType(str, Enum):
    WITH_MIDTERM = "with_midterm"
    WITHOUT_MIDTERM = "without_midterm"


@dataclass(frozen=True)
class GradeBand:
    min_percentage: float
    label: str
    point: float


@dataclass(frozen=True)
class GradeScale:
    name: str
    bands: Tuple[GradeBand, ...]
    fail_label: str = "F"

    @property
    def labels(self) -> List[str]:
        return [band.label for band in self.bands] + [self.fail_label]


TEN_POINT = GradeScale(
    "ten_point",
    (
        GradeBand(90, "O", 10.0),
        GradeBand(80, "A+", 9.0),
        GradeBand(70, "A", 8.0),
        GradeBand(60, "B+", 7.0),
        GradeBand(50, "B", 6.0),
        GradeBand(45, "C", 5.0),
        GradeBand(40, "D", 4.0),
    ),
)

FOUR_POINT = GradeScale(
    "four_point",
    (
        GradeBand(90, "A+", 4.0),
        GradeBand(85, "A", 4.0),
        GradeBand(80, "A-", 3.7),
        GradeBand(75, "B+", 3.3),
        GradeBand(70, "B", 3.0),
        GradeBand(65, "B-", 2.7),
        GradeBand(60, "C+", 2.3),
        GradeBand(55, "C", 2.0),
        GradeBand(50, "C-", 1.7),
        GradeBand(45, "D+", 1.3),
        GradeBand(40, "D", 1.0),
    ),
)

SCALES: Dict[str, GradeScale] = {scale.name: scale for scale in (TEN_POINT, FOUR_POINT)}


def scale_from_settings() -> GradeScale:
    try:
        return SCALES[settings.grade_scale]
    except KeyError as exc:
        raise ConfigurationError(f"Unsupported grade scale: {settings.grade_scale}") from exc


@dataclass(frozen=True)
class Standards:
    """Component ceilings every course is normalised onto before banding."""

    attendance_max: float = 5
    cas_max: float = 30
    midterm_max: float = 20
    final_max: float = 50
    pass_percentage: float = 40

    @classmethod
    def from_settings(cls) -> "Standards":
        return cls(
            attendance_max=settings.standard_attendance_max,
            cas_max=settings.standard_cas_max,
            midterm_max=settings.standard_midterm_max,
            final_max=settings.standard_final_max,
            pass_percentage=settings.pass_percentage,
        )


@dataclass(frozen=True)
class AssessmentConfig:
    subject_type: SubjectType = SubjectType.WITH_MIDTERM
    attendance_max: float = 5
    cas_slots: int = 3
    cas_max_each: float | None = None
    cas_select_count: int = 2
    final_ca_target: float | None = None
    midterm_max: float | None = None
    final_exam_max: float = 50

    @property
    def has_midterm(self) -> bool:
        return self.subject_type == SubjectType.WITH_MIDTERM


@dataclass(frozen=True)
class CourseMarks:
    attendance: float | None = None
    cas_scores: Tuple[float | None, ...] = ()
    midterm: float | None = None
    final_exam: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "cas_scores", tuple(self.cas_scores))


@dataclass(frozen=True)
class GradeResult:
    grade: str
    grade_point: float
    percentage: float | None = None

    @property
    def is_final(self) -> bool:
        return self.grade not in (PENDING, INCOMPLETE)

    @classmethod
    def pending(cls) -> "GradeResult":
        return cls(PENDING, 0.0)

    @classmethod
    def incomplete(cls) -> "GradeResult":
        return cls(INCOMPLETE, 0.0)


def _round_up(value: float) -> int:
    # round first so 24.000000000004 does not become 25
    return math.ceil(round(value, 6))


def _round_up_within(value: float, ceiling: float) -> float:
    # an in-range value never rounds past a fractional ceiling
    if round(value, 6) <= ceiling:
        return min(_round_up(value), ceiling)
    return _round_up(value)


def prorate(score: float, actual_max: float, target_max: float) -> float:
    if actual_max == target_max:
        return score
    if actual_max <= 0:
        raise ConfigurationError("actual_max must be greater than 0")
    return _round_up_within(score / actual_max * target_max, target_max)


def _best_scores(scores: Iterable[Optional[float]], select_count: int) -> List[float]:
    present = sorted((score for score in scores if score is not None), reverse=True)
    return present[: max(select_count, 0)]


def best_cas_total(scores: Iterable[Optional[float]], select_count: int) -> Tuple[int, int]:
    """
    Sum the best ``select_count`` present scores, rounded up.
    Returns (total, number of scores that went into it).
    """
    kept = _best_scores(scores, select_count)
    return _round_up(sum(kept)), len(kept)


def grade_from_percentage(percentage: float, scale: GradeScale | None = None) -> Tuple[str, float]:
    scale = scale or scale_from_settings()
    rounded = round(percentage, 2)
    for band in scale.bands:
        if rounded >= band.min_percentage:
            return band.label, band.point
    return scale.fail_label, 0.0


def validate_inputs(
    config: AssessmentConfig,
    marks: CourseMarks,
    *,
    standards: Standards | None = None,
    strict: bool = False,
) -> None:
    standards = standards or Standards.from_settings()
    cas_max_each = standards.cas_max if config.cas_max_each is None else config.cas_max_each
    midterm_max = standards.midterm_max if config.midterm_max is None else config.midterm_max

    maxima = {
        "attendance_max": config.attendance_max,
        "cas_max_each": cas_max_each,
        "final_exam_max": config.final_exam_max,
    }
    if config.has_midterm:
        maxima["midterm_max"] = midterm_max
    for name, value in maxima.items():
        if value <= 0:
            raise ConfigurationError(f"{name} must be greater than 0, got {value:g}")

    if config.cas_slots < 1:
        raise ConfigurationError("cas_slots must be at least 1")
    if config.cas_select_count < 1:
        raise ConfigurationError("cas_select_count must be at least 1")
    if len(marks.cas_scores) != config.cas_slots:
        raise ConfigurationError(
            f"Expected {config.cas_slots} CAS scores, got {len(marks.cas_scores)}"
        )

    if not strict:
        return

    if config.cas_select_count > config.cas_slots:
        raise ConfigurationError(
            f"cas_select_count ({config.cas_select_count}) exceeds cas_slots ({config.cas_slots})"
        )

    checks: List[Tuple[str, Optional[float], float]] = [
        ("attendance", marks.attendance, config.attendance_max),
        ("final_exam", marks.final_exam, config.final_exam_max),
    ]
    checks.extend((f"cas[{i}]", score, cas_max_each) for i, score in enumerate(marks.cas_scores))
    if config.has_midterm:
        checks.append(("midterm", marks.midterm, midterm_max))

    for name, value, ceiling in checks:
        if value is None:
            continue
        if value < 0 or value > ceiling:
            raise OutOfRangeError(f"{name} must be between 0 and {ceiling:g}, got {value:g}")


def missing_components(config: AssessmentConfig, marks: CourseMarks) -> List[str]:
    missing = []
    if marks.attendance is None:
        missing.append("attendance")
    missing.extend(f"cas[{i}]" for i, score in enumerate(marks.cas_scores) if score is None)
    if config.has_midterm and marks.midterm is None:
        missing.append("midterm")
    if marks.final_exam is None:
        missing.append("final_exam")
    return missing


def _scaled_cas(config: AssessmentConfig, marks: CourseMarks, standards: Standards) -> Tuple[float, float]:
    kept = _best_scores(marks.cas_scores, config.cas_select_count)
    considered = len(kept)
    cas_max_each = standards.cas_max if config.cas_max_each is None else config.cas_max_each
    available = cas_max_each * considered
    best = _round_up_within(sum(kept), available)

    if config.final_ca_target is not None and config.final_ca_target > 0:
        target = config.final_ca_target
        if considered == 0:
            return 0, target
        percentage = best / available * 100
        return _round_up_within(percentage / 100 * target, target), target

    ceiling = standards.cas_max * considered
    if considered == 0:
        return 0, ceiling
    return prorate(best, available, ceiling), ceiling


def _components(config: AssessmentConfig, marks: CourseMarks, standards: Standards) -> List[Tuple[float, float]]:
    midterm_max = standards.midterm_max if config.midterm_max is None else config.midterm_max
    components = [
        (prorate(marks.attendance, config.attendance_max, standards.attendance_max), standards.attendance_max),
        _scaled_cas(config, marks, standards),
        (prorate(marks.final_exam, config.final_exam_max, standards.final_max), standards.final_max),
    ]
    if config.has_midterm:
        components.append((prorate(marks.midterm, midterm_max, standards.midterm_max), standards.midterm_max))
    return components


def calc_percentage(components: Iterable[Tuple[float, float]]) -> float:
    obtained = 0.0
    maximum = 0.0
    for score, max_marks in components:
        obtained += score
        maximum += max_marks
    if maximum <= 0:
        return 0.0
    return obtained / maximum * 100


def evaluate(
    config: AssessmentConfig,
    marks: CourseMarks,
    *,
    standards: Standards | None = None,
    scale: GradeScale | None = None,
    strict: bool | None = None,
) -> GradeResult:
    standards = standards or Standards.from_settings()
    scale = scale or scale_from_settings()
    strict = settings.strict_marks if strict is None else strict
    validate_inputs(config, marks, standards=standards, strict=strict)

    if marks.final_exam is None:
        return GradeResult.pending()

    missing = missing_components(config, marks)
    if missing:
        logger.debug("Marks incomplete, missing %s", ", ".join(missing))
        return GradeResult.incomplete()

    exact = calc_percentage(_components(config, marks, standards))
    percentage = round(exact, 2)
    final_exam_percentage = marks.final_exam / config.final_exam_max * 100
    # the gate uses the unrounded value; only banding rounds
    if final_exam_percentage < standards.pass_percentage or exact < standards.pass_percentage:
        logger.debug(
            "Failed pass gate: final exam %.2f%%, overall %.4f%%", final_exam_percentage, exact
        )
        return GradeResult(scale.fail_label, 0.0, percentage)

    label, point = grade_from_percentage(percentage, scale)
    return GradeResult(label, point, percentage)


def best_possible_result(
    config: AssessmentConfig,
    marks: CourseMarks,
    *,
    standards: Standards | None = None,
    scale: GradeScale | None = None,
    strict: bool | None = None,
) -> GradeResult:
    """Grade the course would get with full marks in the final exam."""
    return evaluate(
        config,
        replace(marks, final_exam=config.final_exam_max),
        standards=standards,
        scale=scale,
        strict=strict,
    )


def grade_distribution(results: Iterable[GradeResult], scale: GradeScale | None = None) -> Dict[str, int]:
    scale = scale or scale_from_settings()
    counts = Counter(result.grade for result in results if result.is_final)
    return {label: counts[label] for label in scale.labels if counts[label]}
