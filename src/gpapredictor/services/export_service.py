import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from gpapredictor.core.gpa import Term
from gpapredictor.core.grades import AssessmentConfig, CourseMarks, SubjectType
from gpapredictor.state.course_book import Course, CourseBook

logger = logging.getLogger(__name__)


class ImportFormatError(Exception):
    pass


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class ConfigDocument(_Document):
    subject_type: SubjectType = SubjectType.WITH_MIDTERM
    attendance_max: float = Field(default=5, gt=0)
    cas_slots: Optional[int] = Field(default=None, ge=1)
    cas_max_each: Optional[float] = Field(default=None, gt=0)
    cas_select_count: int = Field(default=2, ge=1)
    final_ca_target: Optional[float] = None
    midterm_max: Optional[float] = Field(default=None, gt=0)
    final_exam_max: float = Field(default=50, gt=0)


class MarksDocument(_Document):
    attendance: Optional[float] = None
    cas_scores: List[Optional[float]] = Field(default_factory=list)
    midterm: Optional[float] = None
    final_exam: Optional[float] = None


class CourseDocument(_Document):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    code: str = ""
    name: str = ""
    credits: int = Field(default=3, ge=1)
    term: str = ""
    config: ConfigDocument = Field(default_factory=ConfigDocument)
    marks: MarksDocument = Field(default_factory=MarksDocument)

    @classmethod
    def from_course(cls, course: Course) -> "CourseDocument":
        config = course.config
        marks = course.marks
        return cls(
            id=course.id,
            code=course.code,
            name=course.name,
            credits=course.credits,
            term=course.term,
            config=ConfigDocument(
                subject_type=config.subject_type,
                attendance_max=config.attendance_max,
                cas_slots=config.cas_slots,
                cas_max_each=config.cas_max_each,
                cas_select_count=config.cas_select_count,
                final_ca_target=config.final_ca_target,
                midterm_max=config.midterm_max,
                final_exam_max=config.final_exam_max,
            ),
            marks=MarksDocument(
                attendance=marks.attendance,
                cas_scores=list(marks.cas_scores),
                midterm=marks.midterm,
                final_exam=marks.final_exam,
            ),
        )

    def to_course(self) -> Course:
        slots = self.config.cas_slots or len(self.marks.cas_scores) or AssessmentConfig.cas_slots
        scores = tuple(self.marks.cas_scores[:slots])
        scores += (None,) * (slots - len(scores))
        return Course(
            id=self.id,
            code=self.code,
            name=self.name,
            credits=self.credits,
            term=self.term,
            config=AssessmentConfig(
                subject_type=self.config.subject_type,
                attendance_max=self.config.attendance_max,
                cas_slots=slots,
                cas_max_each=self.config.cas_max_each,
                cas_select_count=self.config.cas_select_count,
                final_ca_target=self.config.final_ca_target,
                midterm_max=self.config.midterm_max,
                final_exam_max=self.config.final_exam_max,
            ),
            marks=CourseMarks(
                attendance=self.marks.attendance,
                cas_scores=scores,
                midterm=self.marks.midterm,
                final_exam=self.marks.final_exam,
            ),
        )


class TermDocument(_Document):
    name: str
    credits: int = Field(default=18, ge=1)
    gpa: float = Field(default=0.0, ge=0)


def export_book(book: CourseBook) -> Dict[str, Any]:
    return {
        "courses": [
            CourseDocument.from_course(course).model_dump(mode="json", by_alias=True)
            for course in book.courses
        ],
        "terms": list(book.terms),
        "termRecords": [
            TermDocument(name=t.name, credits=t.credits, gpa=t.gpa).model_dump(mode="json", by_alias=True)
            for t in book.term_records
        ],
    }


def export_json(book: CourseBook) -> str:
    return json.dumps(export_book(book), indent=2)


def _parse_list(raw: Any, model: type, label: str) -> List[Any]:
    parsed = []
    for index, entry in enumerate(raw):
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping %s #%d during import: %s", label, index, exc.errors()[0].get("msg"))
    return parsed


def import_book(data: Any) -> CourseBook:
    if not isinstance(data, dict):
        raise ImportFormatError("Invalid data format")

    book = CourseBook()

    raw_courses = data.get("courses")
    if isinstance(raw_courses, list):
        docs = _parse_list(raw_courses, CourseDocument, "course")
        book = CourseBook(courses=tuple(doc.to_course() for doc in docs), terms=book.terms)

    raw_terms = data.get("terms")
    if isinstance(raw_terms, list):
        names = []
        for entry in raw_terms:
            if isinstance(entry, str) and entry.strip() and entry not in names:
                names.append(entry)
            else:
                logger.warning("Skipping term name during import: %r", entry)
        book = CourseBook(courses=book.courses, terms=tuple(names))

    raw_records = data.get("termRecords")
    if isinstance(raw_records, list):
        docs = _parse_list(raw_records, TermDocument, "term record")
        records = tuple(Term(name=doc.name, credits=doc.credits, gpa=doc.gpa) for doc in docs)
        book = CourseBook(courses=book.courses, terms=book.terms, term_records=records)

    return book


def import_json(text: str) -> CourseBook:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError("Invalid data format") from exc
    return import_book(data)
