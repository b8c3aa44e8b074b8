import unittest

from gpapredictor.core.gpa import (
    CourseResult,
    Term,
    calculate_cgpa,
    calculate_tgpa,
    term_from_courses,
    weighted_average,
)
from gpapredictor.core.grades import TEN_POINT, AssessmentConfig, ConfigurationError, CourseMarks, Standards
from gpapredictor.state.course_book import new_course

THEORY = AssessmentConfig(cas_slots=3, cas_max_each=30, cas_select_count=3, midterm_max=20, final_exam_max=50)


class WeightedAverageTests(unittest.TestCase):
    def test_empty_is_zero(self):
        self.assertEqual(weighted_average([]), 0.0)

    def test_single_entry_returns_its_point(self):
        self.assertEqual(weighted_average([CourseResult(4, 7.5)]), 7.5)
        self.assertEqual(weighted_average([(1, 3.3)]), 3.3)

    def test_sgpa(self):
        courses = [CourseResult(4, 9), CourseResult(5, 8), CourseResult(2, 10)]
        self.assertAlmostEqual(weighted_average(courses, round_to=2), 8.73, places=2)

    def test_zero_credit_entries_are_skipped(self):
        self.assertEqual(weighted_average([(0, 10), (3, 8)]), 8.0)

    def test_only_zero_credits_is_undefined(self):
        self.assertIsNone(weighted_average([(0, 10), (0, 4)]))

    def test_negative_credits_rejected(self):
        with self.assertRaises(ConfigurationError):
            weighted_average([(-1, 8)])

    def test_cgpa(self):
        terms = [Term("Semester 1", 18, 8.0), Term("Semester 2", 22, 9.0)]
        self.assertAlmostEqual(calculate_cgpa(terms), 8.55, places=2)


class TermGpaTests(unittest.TestCase):
    def setUp(self):
        self.graded = new_course("CS101", "Programming", 4, config=THEORY, marks=CourseMarks(5, (15, 12, 14), 20, 45))
        self.pending = new_course("MA101", "Calculus", 3, config=THEORY, marks=CourseMarks(5, (15, 12, 14), 20, None))
        self.kwargs = {"standards": Standards(), "scale": TEN_POINT}

    def test_ungraded_courses_left_out(self):
        self.assertEqual(calculate_tgpa([self.graded, self.pending], **self.kwargs), 7.0)

    def test_ungraded_courses_counted_as_zero_on_request(self):
        tgpa = calculate_tgpa([self.graded, self.pending], include_ungraded=True, **self.kwargs)
        self.assertAlmostEqual(tgpa, 4.0)

    def test_no_graded_courses(self):
        self.assertEqual(calculate_tgpa([self.pending], **self.kwargs), 0.0)

    def test_term_from_courses(self):
        term = term_from_courses("Semester 1", [self.graded, self.pending], **self.kwargs)
        self.assertEqual(term, Term("Semester 1", 4, 7.0))


if __name__ == "__main__":
    unittest.main()
