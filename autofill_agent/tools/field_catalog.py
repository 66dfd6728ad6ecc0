"""Catalog of semantic field types recognised on application forms.

Each FieldType carries the signals the classifier scores against:

* ``keywords``: substrings searched for in the descriptor's search text. An
  entry may list synonyms separated by ``|``; the entry counts as found when
  any synonym is present.
* ``patterns``: regular expressions; any hit counts as a pattern match.
* ``context``: tags that indicate the surrounding section (e.g. ``education``).
* ``exclude``: substrings that disqualify the type outright.
* ``expected_input_types``: control subtypes that earn the full type bonus.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

AFFIRMATIVE = ('yes', 'y', 'true', '1', 'affirmative', 'correct', 'i am', 'i do', 'i have', 'i will')
NEGATIVE = ('no', 'n', 'false', '0', 'negative', 'incorrect', 'i am not', 'i do not', 'i have not', 'i will not')


@dataclass(frozen=True)
class FieldType:
    id: str
    keywords: Tuple[str, ...]
    patterns: Tuple[Pattern, ...]
    context: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    weight: float = 1.0
    expected_input_types: Tuple[str, ...] = ()
    answer_vocabulary: Optional[Tuple[Tuple[str, ...], Tuple[str, ...]]] = None
    boolean: bool = False
    default_intent: Optional[bool] = None
    multi_token: bool = False

    @property
    def category(self) -> str:
        return "boolean" if self.boolean else "text"


def _field(
    type_id: str,
    keywords: Iterable[str],
    patterns: Iterable[str],
    context: Iterable[str] = (),
    exclude: Iterable[str] = (),
    weight: float = 1.0,
    input_types: Iterable[str] = ("text",),
    boolean: bool = False,
    default_intent: Optional[bool] = None,
    multi_token: bool = False,
) -> FieldType:
    return FieldType(
        id=type_id,
        keywords=tuple(keywords),
        patterns=tuple(re.compile(p, re.IGNORECASE) for p in patterns),
        context=tuple(context),
        exclude=tuple(exclude),
        weight=weight,
        expected_input_types=tuple(input_types),
        answer_vocabulary=(AFFIRMATIVE, NEGATIVE) if boolean else None,
        boolean=boolean,
        default_intent=default_intent,
        multi_token=multi_token,
    )


_CHOICE = ("select-one", "radio", "checkbox", "text")
_YES_NO_CONTEXT = ("legal", "employment", "eligibility")

DEFAULT_FIELD_TYPES: List[FieldType] = [
    # Personal information
    _field("firstName", ("first", "name"),
           (r"first\s*name", r"given\s*name", r"fore\s*name", r"\bfname\b"),
           context=("name", "personal"),
           exclude=("last", "middle", "full", "company", "employer", "school", "preferred", "nick", "reference", "emergency")),
    _field("middleName", ("middle",),
           (r"middle\s*(name|initial)",),
           context=("name",),
           exclude=("first", "last")),
    _field("lastName", ("last|surname|family", "name"),
           (r"last\s*name", r"family\s*name", r"surname", r"\blname\b"),
           context=("name", "personal"),
           exclude=("first", "middle", "full", "company", "employer", "school", "preferred", "reference", "emergency")),
    _field("fullName", ("name", "full|legal|complete|your"),
           (r"full\s*name", r"legal\s*name", r"complete\s*name", r"your\s*name", r"^\s*name\b"),
           context=("name", "personal", "identity"),
           exclude=("first", "last", "middle", "company", "employer", "school", "university", "preferred",
                    "user", "file", "reference", "manager", "emergency", "recruiter"),
           weight=0.9),
    _field("preferredName", ("preferred|nick", "name"),
           (r"preferred\s*(first\s*)?name", r"nick\s*name"),
           context=("name",),
           exclude=("last",)),
    _field("email", ("email",),
           (r"e-?mail",),
           context=("mail", "address"),
           input_types=("email", "text")),
    _field("phone", ("phone|mobile|cell|telephone",),
           (r"phone", r"mobile", r"\bcell", r"telephone", r"contact\s*number"),
           context=("contact", "number"),
           exclude=("fax", "emergency", "type", "extension", "country code", "device"),
           input_types=("tel", "text")),
    _field("phoneCountryCode", ("country|dial", "code"),
           (r"country\s*code", r"dial(ing)?\s*code", r"phone\s*code"),
           context=("phone",),
           exclude=("zip", "postal"),
           input_types=("select-one", "text")),
    _field("phoneType", ("phone|number|device", "type"),
           (r"phone\s*type", r"(number|device)\s*type"),
           context=("phone",),
           input_types=("select-one", "text")),

    # Address
    _field("address", ("address|street",),
           (r"street\s*address", r"address\s*line\s*1", r"residential\s*address", r"home\s*address", r"^\s*address\b"),
           context=("location", "residence", "home"),
           exclude=("email", "e-mail", "line 2", "address2", "web", "url", "ip address")),
    _field("address2", ("address|apartment|suite",),
           (r"address\s*line\s*2", r"address2", r"\bapt\b", r"\bsuite\b", r"\bunit\b"),
           context=("location", "residence"),
           exclude=("email", "e-mail")),
    _field("city", ("city|town",),
           (r"\bcity\b", r"\btown\b"),
           context=("address", "location"),
           exclude=("state", "country", "zip", "postal", "ethnicity", "citizen")),
    _field("state", ("state|province|region",),
           (r"\bstate\b", r"province", r"\bregion\b"),
           context=("address", "location"),
           exclude=("statement", "united states", "authoriz", "sponsor", "city")),
    _field("zipCode", ("zip|postal|postcode",),
           (r"\bzip", r"postal\s*code", r"post\s*code"),
           context=("address", "location")),
    _field("country", ("country|nation",),
           (r"\bcountry\b", r"\bnation\b"),
           context=("address", "location"),
           exclude=("code", "dial", "citizen", "restricted", "authoriz"),
           input_types=("select-one", "text")),
    _field("location", ("location",),
           (r"current\s*location", r"^\s*location\b", r"where.*(live|based|located)"),
           context=("address", "current"),
           exclude=("preferred", "relocat", "work location", "company", "job location", "office"),
           weight=0.9),

    # Links
    _field("linkedin", ("linkedin|linked-in|linked in",),
           (r"linked\s*-?\s*in",),
           context=("profile", "url"),
           input_types=("url", "text")),
    _field("github", ("github|git hub",),
           (r"git\s*hub",),
           context=("profile", "url"),
           exclude=("linkedin",),
           input_types=("url", "text")),
    _field("portfolio", ("portfolio",),
           (r"portfolio", r"behance", r"dribbble"),
           context=("url", "website", "link"),
           exclude=("linkedin", "github"),
           weight=0.9,
           input_types=("url", "text")),
    _field("website", ("website|web site|homepage|url",),
           (r"web\s*site", r"personal\s*(site|url|page)", r"home\s*page", r"\burl\b"),
           context=("personal", "link"),
           exclude=("linkedin", "github", "portfolio", "company website"),
           weight=0.8,
           input_types=("url", "text")),

    # Legal and eligibility questions
    _field("workAuthorization", ("authoriz", "work"),
           (r"authori[sz]ed.*work", r"legally.*work", r"eligible.*work", r"right.*work",
            r"work.*authori[sz]ation", r"work\s*permit", r"authori[sz]ed.*employ"),
           context=_YES_NO_CONTEXT + ("work",),
           exclude=("sponsor",),
           input_types=_CHOICE, boolean=True, default_intent=True),
    _field("requireSponsorship", ("sponsor", "visa|immigration"),
           (r"sponsor", r"visa\s*(status|support)", r"h-?1b"),
           context=_YES_NO_CONTEXT + ("visa", "immigration"),
           input_types=_CHOICE, boolean=True, default_intent=False),
    _field("legalRightToWork", ("legal", "right to work|i-9|proof"),
           (r"proof.*legal.*right", r"\bi-?9\b", r"employment\s*eligibility\s*verification"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=True),
    _field("legalAge", ("18|eighteen", "age|older|over"),
           (r"18\s*years", r"at\s*least\s*18", r"over\s*(the\s*age\s*of\s*)?18", r"legal\s*age"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=True),
    _field("backgroundCheck", ("background",),
           (r"background\s*(check|screening|investigation)",),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=True),
    _field("willingToRelocate", ("relocat",),
           (r"relocat", r"willing.*move"),
           context=("preferences", "location"),
           input_types=_CHOICE, boolean=True),
    _field("previouslyEmployed", ("previous|formerly|former|ever", "employ|work"),
           (r"previously\s*(been\s*)?(employed|worked)", r"ever\s*(been\s*)?(employed|worked)",
            r"former\s*employee", r"worked\s*(for|at)\s*(us|this\s*company|our)"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=False),
    _field("securityClearance", ("clearance",),
           (r"security\s*clearance", r"clearance\s*level", r"(active|current).*clearance"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True),
    _field("governmentEmployee", ("government|federal", "employ"),
           (r"government\s*(employ|official)", r"federal\s*employee", r"special\s*government\s*employee"),
           context=_YES_NO_CONTEXT,
           exclude=("family", "relative"),
           input_types=_CHOICE, boolean=True, default_intent=False),
    _field("familyGovernmentEmployee", ("family|relative", "government"),
           (r"family\s*member.*government", r"relative.*government", r"immediate\s*family.*(government|official)"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=False),
    _field("debarred", ("debar|suspend",),
           (r"debarred", r"suspended.*contract", r"ineligible.*contract"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=False),
    _field("restrictedCountryCitizen", ("citizen|national", "iran|cuba|north korea|syria|export"),
           (r"iran|cuba|north\s*korea|syria|crimea", r"export\s*control"),
           context=_YES_NO_CONTEXT,
           input_types=_CHOICE, boolean=True, default_intent=False),

    # Education
    _field("university", ("university|college|school|institution",),
           (r"universit", r"college", r"school", r"institution", r"where.*stud"),
           context=("education", "academic"),
           exclude=("degree", "major", "gpa", "graduat", "email", "high school diploma"),
           weight=0.9),
    _field("degree", ("degree|qualification|diploma",),
           (r"degree", r"qualification", r"education\s*level", r"highest.*education"),
           context=("education", "academic"),
           exclude=("field of", "major", "discipline"),
           weight=0.9,
           input_types=("select-one", "text")),
    _field("major", ("major|discipline|concentration|field of study|specialization",),
           (r"\bmajor\b", r"field\s*of\s*study", r"discipline", r"speciali[sz]ation", r"concentration"),
           context=("education", "academic"),
           weight=0.9),
    _field("gpa", ("gpa|grade point|cgpa",),
           (r"\bgpa\b", r"grade\s*point", r"\bcgpa\b"),
           context=("education",)),
    _field("graduationDate", ("graduat|completion",),
           (r"graduation\s*(date|year)", r"when.*graduat", r"completion\s*date", r"year\s*graduated"),
           context=("education",),
           input_types=("date", "month", "text")),

    # Experience
    _field("currentCompany", ("company|employer|organization",),
           (r"current\s*(company|employer)", r"present\s*employer", r"(company|employer)\s*name",
            r"most\s*recent\s*employer"),
           context=("current", "employment"),
           exclude=("university", "school", "website", "email", "size", "previous", "former"),
           weight=0.9),
    _field("currentTitle", ("title|position|role",),
           (r"current\s*(job\s*)?(title|position|role)", r"job\s*title", r"(position|role)\s*title", r"^\s*title\b"),
           context=("current", "job"),
           exclude=("company", "salary", "applying", "desired", "course", "pronoun"),
           weight=0.9),
    _field("employmentStartDate", ("start|from", "employ|job|position"),
           (r"employment\s*start", r"(job|position)\s*start"),
           context=("experience", "employment"),
           input_types=("date", "month", "text")),
    _field("employmentEndDate", ("end|until", "employ|job|position"),
           (r"employment\s*end", r"(job|position)\s*end"),
           context=("experience", "employment"),
           input_types=("date", "month", "text")),
    _field("responsibilities", ("responsibilit|duties|description",),
           (r"responsibilit", r"duties", r"job\s*description", r"describe.*role"),
           context=("experience", "work"),
           exclude=("summary", "cover"),
           input_types=("textarea", "text")),
    _field("yearsExperience", ("year", "experience"),
           (r"years?\s*(of\s*)?(professional\s*)?experience", r"how\s*long.*worked", r"total\s*experience"),
           context=("experience",),
           input_types=("number", "select-one", "text")),

    # Skills and free text
    _field("skills", ("skill|expertise|competenc|proficienc|technolog",),
           (r"skills?", r"expertise", r"proficienc", r"competenc"),
           context=("technical",),
           weight=0.8,
           input_types=("text", "textarea"),
           multi_token=True),
    _field("languages", ("language",),
           (r"languages?\s*(spoken|you\s*speak)?", r"fluen"),
           exclude=("programming",),
           weight=0.9),
    _field("certifications", ("certific|licen",),
           (r"certification", r"licen[cs]e"),
           weight=0.9),
    _field("professionalSummary", ("summary|about|bio|objective|overview",),
           (r"professional\s*summary", r"about\s*(yourself|you|me)", r"\bbio\b", r"objective",
            r"career\s*summary", r"summary"),
           context=("professional", "profile"),
           exclude=("cover letter",),
           weight=0.8,
           input_types=("textarea", "text")),
    _field("coverLetter", ("cover",),
           (r"cover\s*letter",),
           input_types=("textarea", "file")),
    _field("resume", ("resume|résumé|cv",),
           (r"resume", r"\bcv\b", r"curriculum\s*vitae"),
           exclude=("cover",),
           input_types=("file",)),
    _field("additionalInfo", ("additional|anything else|other information",),
           (r"additional\s*information", r"anything\s*else"),
           weight=0.7,
           input_types=("textarea", "text")),

    # Voluntary self-identification
    _field("gender", ("gender|sex",),
           (r"gender", r"\bsex\b"),
           context=("eeo", "demographic", "diversity", "voluntary"),
           exclude=("orientation",),
           input_types=("select-one", "radio", "text")),
    _field("race", ("race|ethnic|racial",),
           (r"\brace\b", r"ethnicity", r"racial"),
           context=("eeo", "demographic", "diversity", "voluntary"),
           exclude=("hispanic", "latino"),
           input_types=("select-one", "radio", "text")),
    _field("hispanicLatino", ("hispanic|latin",),
           (r"hispanic", r"latin[oax]"),
           context=("eeo", "demographic", "voluntary"),
           input_types=_CHOICE, boolean=True),
    _field("veteranStatus", ("veteran|military|armed forces",),
           (r"veteran", r"military", r"armed\s*forces"),
           context=("eeo", "demographic", "voluntary"),
           input_types=("select-one", "radio", "text")),
    _field("disability", ("disab",),
           (r"disabilit", r"disabled"),
           context=("eeo", "demographic", "voluntary"),
           input_types=("select-one", "radio", "text")),
    _field("pronouns", ("pronoun",),
           (r"pronouns?",),
           input_types=("select-one", "text")),

    # Preferences and referral
    _field("preferredLocation", ("prefer|geographic|which", "location|office|site"),
           (r"preferred\s*(work\s*)?location", r"geographic.*preference", r"which\s*(office|location)",
            r"where.*(like|want|prefer).*work"),
           context=("preferences",),
           weight=0.8),
    _field("availableStartDate", ("start|available|begin|availability",),
           (r"start\s*date", r"available.*start", r"when.*(start|begin)", r"earliest.*start", r"availability"),
           context=("preferences",),
           exclude=("employment", "graduat", "education", "job start", "position start"),
           input_types=("date", "text")),
    _field("salary", ("salary|compensation|pay|wage",),
           (r"salary", r"compensation", r"desired\s*pay", r"pay\s*expectation"),
           context=("preferences",),
           weight=0.9),
    _field("noticePeriod", ("notice",),
           (r"notice\s*period", r"how\s*much\s*notice"),
           context=("preferences",)),
    _field("referralSource", ("hear|source|find",),
           (r"how\s*did\s*you\s*(hear|find|learn)", r"(referral|application|lead)\s*source",
            r"where\s*did\s*you\s*(hear|find|see)"),
           weight=0.8,
           input_types=("select-one", "text")),
    _field("referrerName", ("referr|referred",),
           (r"referred\s*by", r"referr(al|er)\s*name", r"who\s*referred", r"employee\s*referral"),
           exclude=("source", "hear"),
           weight=0.7),
]


def default_catalog() -> List[FieldType]:
    """Return the default field type catalog."""
    return list(DEFAULT_FIELD_TYPES)


def catalog_index(catalog: Iterable[FieldType]) -> Dict[str, FieldType]:
    return {ft.id: ft for ft in catalog}
