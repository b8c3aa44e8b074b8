import json
import unittest

from gpapredictor.core.gpa import Term
from gpapredictor.core.grades import AssessmentConfig, CourseMarks, SubjectType
from gpapredictor.services.export_service import ImportFormatError, export_book, export_json, import_book, import_json
from gpapredictor.state.course_book import DEFAULT_TERMS, CourseBook, new_course


def _sample_book() -> CourseBook:
    lab = AssessmentConfig(
        subject_type=SubjectType.WITHOUT_MIDTERM,
        attendance_max=15,
        cas_slots=4,
        cas_max_each=15,
        cas_select_count=3,
        final_exam_max=100,
    )
    return (
        CourseBook()
        .add_course(new_course("CS101", "Programming", 4, "Semester 1", marks=CourseMarks(5, (15, 12, 14), 20, 45)))
        .add_course(new_course("CS102", "Lab", 2, "Semester 1", config=lab, marks=CourseMarks(13, (12, 9, None, 14), None, 71)))
        .add_course(new_course("MA101", "Calculus", 3, "Semester 2", marks=CourseMarks(4, (20, 22, 25), 15, None)))
        .add_term_record(Term("Semester 1", 18, 8.2))
    )


class ExportTests(unittest.TestCase):
    def test_document_shape(self):
        data = export_book(_sample_book())
        self.assertEqual(set(data), {"courses", "terms", "termRecords"})
        course = data["courses"][0]
        self.assertEqual(course["code"], "CS101")
        self.assertIn("casSelectCount", course["config"])
        self.assertEqual(course["config"]["subjectType"], "with_midterm")
        self.assertEqual(course["marks"]["casScores"], [15, 12, 14])
        self.assertEqual(data["termRecords"], [{"name": "Semester 1", "credits": 18, "gpa": 8.2}])

    def test_round_trip_reproduces_results(self):
        book = _sample_book()
        restored = import_json(export_json(book))
        self.assertEqual(restored, book)
        self.assertEqual([c.result for c in restored.courses], [c.result for c in book.courses])


class ImportTests(unittest.TestCase):
    def test_rejects_non_object(self):
        with self.assertRaises(ImportFormatError):
            import_book(["not", "a", "book"])
        with self.assertRaises(ImportFormatError):
            import_json("{broken")

    def test_missing_sections_keep_defaults(self):
        book = import_book({"unrelated": True})
        self.assertEqual(book.courses, ())
        self.assertEqual(book.terms, DEFAULT_TERMS)
        self.assertEqual(book.term_records, ())

    def test_course_manager_records_fill_defaults(self):
        data = {
            "courses": [{"id": 1700000000000, "code": "CS101", "name": "Intro", "credits": 4, "term": "Semester 1"}],
            "terms": ["Semester 1"],
        }
        book = import_book(data)
        course = book.courses[0]
        self.assertEqual(course.id, "1700000000000")
        self.assertEqual(course.config, AssessmentConfig())
        self.assertEqual(course.marks.cas_scores, (None, None, None))
        self.assertEqual(course.result.grade, "Pending")
        self.assertEqual(book.terms, ("Semester 1",))

    def test_cas_scores_padded_to_slots(self):
        data = {"courses": [{"code": "X", "config": {"casSlots": 4}, "marks": {"casScores": [10, 12]}}]}
        self.assertEqual(import_book(data).courses[0].marks.cas_scores, (10, 12, None, None))

    def test_bad_entries_skipped_with_warning(self):
        data = {
            "courses": [{"code": "BAD", "credits": 0}, {"code": "OK", "credits": 3}],
            "terms": ["Semester 1", 7, "Semester 1"],
            "termRecords": [{"credits": 18}, {"name": "Semester 1", "credits": 20, "gpa": 3.4}],
        }
        with self.assertLogs("gpapredictor.services.export_service", level="WARNING") as logs:
            book = import_book(data)
        self.assertEqual([c.code for c in book.courses], ["OK"])
        self.assertEqual(book.terms, ("Semester 1",))
        self.assertEqual(book.term_records, (Term("Semester 1", 20, 3.4),))
        self.assertEqual(len(logs.records), 4)

    def test_invalid_config_skipped_so_term_still_grades(self):
        data = {
            "courses": [
                {"code": "OK", "credits": 3, "term": "S"},
                {"code": "BAD", "term": "S", "config": {"casSelectCount": 0, "attendanceMax": 0}},
            ]
        }
        with self.assertLogs("gpapredictor.services.export_service", level="WARNING"):
            book = import_book(data)
        self.assertEqual([c.code for c in book.courses], ["OK"])
        self.assertEqual(book.tgpa("S"), 0.0)

    def test_export_json_is_indented(self):
        text = export_json(CourseBook())
        self.assertEqual(json.loads(text), {"courses": [], "terms": list(DEFAULT_TERMS), "termRecords": []})
        self.assertIn("\n  ", text)


if __name__ == "__main__":
    unittest.main()
