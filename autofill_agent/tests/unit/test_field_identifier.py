import unittest

from autofill_agent.core.models import FieldDescriptor
from autofill_agent.core.platform_detector import DEFAULT_PLATFORMS, GENERIC_PLATFORM, Platform
from autofill_agent.tools.field_catalog import catalog_index, default_catalog
from autofill_agent.tools.field_identifier import (
    ScoringWeights,
    SemanticFieldClassifier,
    is_yes_no_question,
    question_kind,
)


def _platform(kind):
    return next(p for p in DEFAULT_PLATFORMS if p.platform is kind)


def _field(label="", name="", input_type="text", kind="input", **extra):
    return FieldDescriptor(control=None, kind=kind, input_type=input_type, label=label, name=name, **extra)


class TestSemanticFieldClassifier(unittest.TestCase):
    """Test scoring and acceptance of field types."""

    def setUp(self):
        self.classifier = SemanticFieldClassifier()
        self.types = catalog_index(default_catalog())

    def test_email_address_scores_high(self):
        result = self.classifier.classify(_field("Email Address", "email", input_type="email"))
        self.assertEqual(result.field_type, "email")
        self.assertGreaterEqual(result.confidence, 0.9)
        self.assertIn("email", result.evidence)

    def test_first_and_last_name(self):
        first = self.classifier.classify(_field("First Name", "first_name"))
        last = self.classifier.classify(_field("Last Name", "last_name"))
        self.assertEqual(first.field_type, "firstName")
        self.assertAlmostEqual(first.confidence, 0.9, places=4)
        self.assertEqual(last.field_type, "lastName")

    def test_linkedin_restricts_candidates(self):
        result = self.classifier.classify(_field("LinkedIn Profile", "linkedin_url"))
        self.assertEqual(result.field_type, "linkedin")
        self.assertEqual([type_id for type_id, _ in result.alternates], ["linkedin"])

    def test_linkedin_wins_over_overlapping_types(self):
        labels = [
            ("Professional Summary (paste your LinkedIn headline)", "summary"),
            ("Website or LinkedIn", "website"),
            ("Portfolio / LinkedIn", "portfolio"),
        ]
        for label, name in labels:
            with self.subTest(label=label):
                result = self.classifier.classify(_field(label, name))
                self.assertEqual(result.field_type, "linkedin")
                self.assertEqual([type_id for type_id, _ in result.alternates], ["linkedin"])

    def test_unrecognised_label_is_not_matched(self):
        result = self.classifier.classify(_field("Favorite color", "color"))
        self.assertIsNone(result.field_type)
        self.assertFalse(result.matched)
        self.assertLess(result.confidence, 0.5)

    def test_exclusion_zeroes_score(self):
        descriptor = _field("Email Address", "email", input_type="email")
        self.assertEqual(self.classifier.score(self.types["address"], descriptor), 0.0)

    def test_yes_no_select_question(self):
        descriptor = _field("Are you legally authorized to work in the United States?",
                            kind="select", input_type="select-one")
        result = self.classifier.classify(descriptor)
        self.assertEqual(result.field_type, "workAuthorization")
        self.assertAlmostEqual(result.confidence, 0.9, places=4)

    def test_alternates_are_sorted_and_capped(self):
        result = self.classifier.classify(_field("First Name", "first_name"))
        scores = [score for _, score in result.alternates]
        self.assertLessEqual(len(result.alternates), 3)
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(result.alternates[0][0], "firstName")

    def test_section_heading_adds_context(self):
        descriptor = _field("GPA", "gpa")
        without = self.classifier.score(self.types["gpa"], descriptor)
        with_section = self.classifier.score(self.types["gpa"], descriptor, "Education")
        self.assertAlmostEqual(without, 0.8, places=4)
        self.assertAlmostEqual(with_section, 0.9, places=4)

    def test_platform_override_wins(self):
        lever = _platform(Platform.LEVER)
        result = self.classifier.classify(_field("Your details", "name"), lever)
        self.assertEqual(result.field_type, "fullName")
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.evidence, "platform override")

    def test_override_ignored_on_generic(self):
        result = self.classifier.classify(_field("First Name", "first_name"), GENERIC_PLATFORM)
        self.assertNotEqual(result.evidence, "platform override")

    def test_platform_threshold_applies(self):
        descriptor = _field("Website", "site")
        generic = self.classifier.classify(descriptor, GENERIC_PLATFORM)
        workday = self.classifier.classify(descriptor, _platform(Platform.WORKDAY))
        self.assertEqual(generic.field_type, "website")
        self.assertAlmostEqual(generic.confidence, 0.64, places=4)
        self.assertIsNone(workday.field_type)
        self.assertAlmostEqual(workday.confidence, generic.confidence)

    def test_custom_weights(self):
        classifier = SemanticFieldClassifier(weights=ScoringWeights(keyword=1.0, pattern=0.0, context=0.0, type=0.0))
        score = classifier.score(self.types["firstName"], _field("First Name", "first_name"))
        self.assertEqual(score, 1.0)

    def test_custom_default_threshold(self):
        classifier = SemanticFieldClassifier(default_threshold=0.95)
        result = classifier.classify(_field("First Name", "first_name"))
        self.assertIsNone(result.field_type)


class TestQuestionKind(unittest.TestCase):

    def test_question_kinds(self):
        self.assertEqual(question_kind("Are you authorized to work in the US?"), "yes_no")
        self.assertEqual(question_kind("What is your expected salary?"), "what")
        self.assertEqual(question_kind("How many years of Python experience do you have?"), "how_many")
        self.assertEqual(question_kind("When can you start?"), "when")
        self.assertIsNone(question_kind("Email"))

    def test_is_yes_no_question(self):
        self.assertTrue(is_yes_no_question("Do you require visa sponsorship?"))
        self.assertFalse(is_yes_no_question("Which office do you prefer?"))


if __name__ == '__main__':
    unittest.main()
