import unittest

from autofill_agent.tools.resume_parser import ResumeParser, extract_date_range, is_section_header

RESUME = """
Jane Q. Doe
Austin, TX | jane.doe@example.com | (555) 123-4567
linkedin.com/in/janedoe | github.com/janedoe | janedoe.dev

Summary
Backend engineer with eight years of experience building data platforms.

Experience
Senior Engineer | Acme Corp
Jan 2019 - Present
• Led migration of billing services to Python
• Mentored four junior engineers
Analyst, Initech
Mar 2015 - Dec 2018
- Built reporting pipelines in SQL

Education
B.S. in Computer Science, University of Texas, 2011 - 2015, GPA: 3.8

Skills
Python, SQL, Docker; Kubernetes | AWS
"""


class TestResumeParser(unittest.TestCase):
    """Test extraction of profile data from resume text."""

    def setUp(self):
        self.profile = ResumeParser().parse(RESUME)

    def test_contact_details(self):
        self.assertEqual(self.profile.first_name, "Jane")
        self.assertEqual(self.profile.last_name, "Doe")
        self.assertEqual(self.profile.email, "jane.doe@example.com")
        self.assertEqual(self.profile.phone, "5551234567")
        self.assertEqual(self.profile.linkedin, "linkedin.com/in/janedoe")
        self.assertEqual(self.profile.github, "github.com/janedoe")
        self.assertEqual(self.profile.portfolio, "janedoe.dev")
        self.assertEqual((self.profile.city, self.profile.state), ("Austin", "TX"))

    def test_summary(self):
        self.assertTrue(self.profile.professional_summary.startswith("Backend engineer"))

    def test_experience(self):
        self.assertEqual(len(self.profile.experiences), 2)
        current, previous = self.profile.experiences
        self.assertEqual((current.title, current.company), ("Senior Engineer", "Acme Corp"))
        self.assertEqual((current.start_date, current.end_date), ("2019-01", ""))
        self.assertTrue(current.current)
        self.assertEqual(len(current.responsibilities), 2)
        self.assertEqual((previous.title, previous.company), ("Analyst", "Initech"))
        self.assertEqual((previous.start_date, previous.end_date), ("2015-03", "2018-12"))
        self.assertEqual(previous.responsibilities, ["Built reporting pipelines in SQL"])

    def test_education(self):
        self.assertEqual(len(self.profile.education), 1)
        entry = self.profile.education[0]
        self.assertEqual(entry.degree, "Bachelor")
        self.assertEqual(entry.institution, "University of Texas")
        self.assertEqual(entry.major, "Computer Science")
        self.assertEqual(entry.gpa, "3.8")
        self.assertEqual((entry.start_date, entry.end_date), ("2011-01", "2015-12"))

    def test_skills(self):
        self.assertEqual(self.profile.skills_list, ["Python", "SQL", "Docker", "Kubernetes", "AWS"])
        self.assertEqual(self.profile.skills, "Python, SQL, Docker, Kubernetes, AWS")

    def test_empty_text(self):
        profile = ResumeParser().parse("")
        self.assertEqual(profile.email, "")
        self.assertEqual(profile.experiences, [])


class TestResumeHelpers(unittest.TestCase):

    def test_extract_date_range(self):
        self.assertEqual(extract_date_range("June 2020 - Aug 2021"), ("2020-06", "2021-08"))
        self.assertEqual(extract_date_range("Jan 2019 - 2021"), ("2019-01", "2021-12"))
        self.assertEqual(extract_date_range("2018 – Present"), ("2018-01", ""))
        self.assertIsNone(extract_date_range("no dates here"))

    def test_is_section_header(self):
        self.assertTrue(is_section_header("Work History:"))
        self.assertTrue(is_section_header("SKILLS"))
        self.assertFalse(is_section_header("Senior Engineer | Acme Corp"))


if __name__ == '__main__':
    unittest.main()
