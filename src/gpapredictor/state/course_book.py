from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from gpapredictor.core.gpa import Term, calculate_cgpa, calculate_tgpa
from gpapredictor.core.grades import (
    AssessmentConfig,
    ConfigurationError,
    CourseMarks,
    GradeResult,
    evaluate,
    validate_inputs,
)

DEFAULT_TERMS: Tuple[str, ...] = ("Semester 1", "Semester 2")


class InvalidUpdateError(Exception):
    pass


@dataclass(frozen=True)
class Course:
    id: str
    code: str
    name: str
    credits: int
    term: str = ""
    config: AssessmentConfig = field(default_factory=AssessmentConfig)
    marks: CourseMarks = field(default_factory=CourseMarks)

    @property
    def result(self) -> GradeResult:
        return evaluate(self.config, self.marks)


def _check_credits(credits: int) -> None:
    if isinstance(credits, bool) or not isinstance(credits, int) or credits < 1:
        raise InvalidUpdateError(f"Credits must be a positive integer, got {credits!r}")


def _check_config(config: AssessmentConfig, marks: Optional[CourseMarks] = None) -> None:
    marks = marks or CourseMarks(cas_scores=(None,) * max(config.cas_slots, 0))
    try:
        validate_inputs(config, marks)
    except ConfigurationError as exc:
        raise InvalidUpdateError(str(exc)) from exc


def new_course(
    code: str,
    name: str,
    credits: int = 3,
    term: str = "",
    config: Optional[AssessmentConfig] = None,
    marks: Optional[CourseMarks] = None,
) -> Course:
    _check_credits(credits)
    config = config or AssessmentConfig()
    marks = marks or CourseMarks(cas_scores=(None,) * config.cas_slots)
    _check_config(config, marks)
    return Course(
        id=uuid.uuid4().hex,
        code=code.strip(),
        name=name.strip(),
        credits=credits,
        term=term,
        config=config,
        marks=marks,
    )


@dataclass(frozen=True)
class RenameCourse:
    code: str
    name: str

    def __post_init__(self) -> None:
        if not self.code.strip() or not self.name.strip():
            raise InvalidUpdateError("Course code and name are required")

    def apply(self, course: Course) -> Course:
        return replace(course, code=self.code.strip(), name=self.name.strip())


@dataclass(frozen=True)
class SetCredits:
    credits: int

    def __post_init__(self) -> None:
        _check_credits(self.credits)

    def apply(self, course: Course) -> Course:
        return replace(course, credits=self.credits)


@dataclass(frozen=True)
class MoveToTerm:
    term: str

    def apply(self, course: Course) -> Course:
        return replace(course, term=self.term)


@dataclass(frozen=True)
class SetMarks:
    marks: CourseMarks

    def apply(self, course: Course) -> Course:
        if len(self.marks.cas_scores) != course.config.cas_slots:
            raise InvalidUpdateError(
                f"Expected {course.config.cas_slots} CAS scores, got {len(self.marks.cas_scores)}"
            )
        return replace(course, marks=self.marks)


@dataclass(frozen=True)
class SetConfig:
    """Swap the assessment scheme; CAS marks are padded or cut to the new slot count."""

    config: AssessmentConfig

    def __post_init__(self) -> None:
        _check_config(self.config)

    def apply(self, course: Course) -> Course:
        scores = course.marks.cas_scores[: self.config.cas_slots]
        scores += (None,) * (self.config.cas_slots - len(scores))
        return replace(course, config=self.config, marks=replace(course.marks, cas_scores=scores))


CourseChange = Union[RenameCourse, SetCredits, MoveToTerm, SetMarks, SetConfig]


@dataclass(frozen=True)
class SetTermCredits:
    credits: int

    def __post_init__(self) -> None:
        _check_credits(self.credits)

    def apply(self, term: Term) -> Term:
        return replace(term, credits=self.credits)


@dataclass(frozen=True)
class SetTermGpa:
    gpa: float

    def __post_init__(self) -> None:
        if self.gpa < 0:
            raise InvalidUpdateError(f"GPA must not be negative, got {self.gpa}")

    def apply(self, term: Term) -> Term:
        return replace(term, gpa=self.gpa)


TermChange = Union[SetTermCredits, SetTermGpa]


@dataclass(frozen=True)
class CourseBook:
    courses: Tuple[Course, ...] = ()
    terms: Tuple[str, ...] = DEFAULT_TERMS
    term_records: Tuple[Term, ...] = ()

    def add_course(self, course: Course) -> "CourseBook":
        return replace(self, courses=self.courses + (course,))

    def remove_course(self, course_id: str) -> "CourseBook":
        return replace(self, courses=tuple(c for c in self.courses if c.id != course_id))

    def update_course(self, course_id: str, change: CourseChange) -> "CourseBook":
        if not any(c.id == course_id for c in self.courses):
            raise InvalidUpdateError(f"Unknown course: {course_id}")
        return replace(
            self,
            courses=tuple(change.apply(c) if c.id == course_id else c for c in self.courses),
        )

    def get_course(self, course_id: str) -> Optional[Course]:
        return next((c for c in self.courses if c.id == course_id), None)

    def add_term(self, name: str) -> "CourseBook":
        name = name.strip()
        if not name or name in self.terms:
            return self
        return replace(self, terms=self.terms + (name,))

    def remove_term(self, name: str) -> "CourseBook":
        terms = tuple(t for t in self.terms if t != name)
        fallback = terms[0] if terms else ""
        courses = tuple(replace(c, term=fallback) if c.term == name else c for c in self.courses)
        return replace(self, terms=terms, courses=courses)

    def courses_in(self, term: str) -> Tuple[Course, ...]:
        return tuple(c for c in self.courses if c.term == term)

    def add_term_record(self, term: Term) -> "CourseBook":
        _check_credits(term.credits)
        return replace(self, term_records=self.term_records + (term,))

    def remove_term_record(self, name: str) -> "CourseBook":
        return replace(self, term_records=tuple(t for t in self.term_records if t.name != name))

    def update_term_record(self, name: str, change: TermChange) -> "CourseBook":
        if not any(t.name == name for t in self.term_records):
            raise InvalidUpdateError(f"Unknown term: {name}")
        return replace(
            self,
            term_records=tuple(change.apply(t) if t.name == name else t for t in self.term_records),
        )

    def tgpa(self, term: Optional[str] = None, *, include_ungraded: bool = False) -> Optional[float]:
        courses = self.courses if term is None else self.courses_in(term)
        return calculate_tgpa(courses, include_ungraded=include_ungraded)

    def cgpa(self) -> Optional[float]:
        return calculate_cgpa(self.term_records)
