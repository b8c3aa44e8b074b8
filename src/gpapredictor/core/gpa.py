from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from gpapredictor.core.grades import (
    ConfigurationError,
    GradeResult,
    GradeScale,
    Standards,
    evaluate,
)


@dataclass(frozen=True)
class CourseResult:
    credits: int
    grade_point: float


@dataclass(frozen=True)
class Term:
    name: str
    credits: int
    gpa: float

    @property
    def grade_point(self) -> float:
        return self.gpa


WeightedItem = Union[CourseResult, Term, Tuple[float, float]]


def _credits_and_point(item: WeightedItem) -> Tuple[float, float]:
    if isinstance(item, tuple):
        return item
    return item.credits, item.grade_point


def weighted_average(items: Iterable[WeightedItem], *, round_to: Optional[int] = None) -> Optional[float]:
    """
    items: iterable of objects with ``credits`` and ``grade_point`` or (credits, grade_point)
    GPA = Σ(credits * grade_point) / Σ(credits)

    Returns 0.0 for no items and None when every item carries zero credits.
    """
    weighted = 0.0
    total_credits = 0.0
    seen = False

    for item in items:
        seen = True
        credits, grade_point = _credits_and_point(item)
        if credits < 0:
            raise ConfigurationError(f"Credits must not be negative, got {credits}")
        if credits == 0:
            continue
        weighted += credits * grade_point
        total_credits += credits

    if not seen:
        return 0.0
    if total_credits == 0:
        return None

    average = weighted / total_credits
    return round(average, round_to) if round_to is not None else average


def graded_results(
    courses: Iterable,
    *,
    include_ungraded: bool = False,
    standards: Standards | None = None,
    scale: GradeScale | None = None,
) -> list[CourseResult]:
    results = []
    for course in courses:
        result: GradeResult = evaluate(course.config, course.marks, standards=standards, scale=scale)
        if result.is_final or include_ungraded:
            results.append(CourseResult(course.credits, result.grade_point))
    return results


def calculate_tgpa(
    courses: Iterable,
    *,
    include_ungraded: bool = False,
    standards: Standards | None = None,
    scale: GradeScale | None = None,
    round_to: Optional[int] = None,
) -> Optional[float]:
    """
    courses: iterable of objects exposing ``credits``, ``config`` and ``marks``.
    Pending and Incomplete courses are left out unless ``include_ungraded`` counts them as zero.
    """
    results = graded_results(courses, include_ungraded=include_ungraded, standards=standards, scale=scale)
    return weighted_average(results, round_to=round_to)


def calculate_cgpa(terms: Iterable[Term], *, round_to: Optional[int] = None) -> Optional[float]:
    return weighted_average(terms, round_to=round_to)


def term_from_courses(
    name: str,
    courses: Iterable,
    *,
    standards: Standards | None = None,
    scale: GradeScale | None = None,
) -> Term:
    results = graded_results(courses, standards=standards, scale=scale)
    tgpa = weighted_average(results)
    credits = sum(result.credits for result in results)
    return Term(name=name, credits=credits, gpa=tgpa or 0.0)
