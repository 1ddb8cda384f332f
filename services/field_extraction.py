"""
Heuristic field extraction from CV text.

Contact and identity details cluster at the top of a CV, so most rules only
look at the "head window" (the first 30% of the text). Vocabulary rules
(profession, gender, marital status, ...) scan the whole text.

Rules are evaluated in the order of FIELD_RULES. Each rule is independent
except for:
- zip code: a 5-7 digit run that is part of the matched mobile or landline
  number (or of any other landline-shaped number) is not a zip code
- secondary phone: the second landline-like number, only when it differs
  from the first landline
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from models.extracted_fields import ExtractedFields

HEAD_WINDOW_RATIO = 0.3
ACHIEVEMENT_WINDOW = 300

SCOPE_HEAD = "head"
SCOPE_FULL = "full"

ISRAELI_CITIES = [
    'תל אביב', 'ירושלים', 'חיפה', 'ראשון לציון', 'פתח תקווה', 'אשדוד', 'נתניה', 'באר שבע',
    'בני ברק', 'חולון', 'רמת גן', 'אשקלון', 'רחובות', 'בת ים', 'כפר סבא', 'הרצליה',
    'חדרה', 'מודיעין', 'נצרת', 'לוד', 'רעננה', 'רמלה', 'גבעתיים', 'נהריה', 'אילת',
    'טבריה', 'קריית גת', 'אור יהודה', 'יהוד', 'דימונה', 'טירה', 'אום אל פחם',
    'מגדל העמק', 'שפרעם', 'אכסאל', 'קלנסווה', 'באקה אל גרביה', 'סחנין', 'משהד',
    'ערערה', 'כפר קאסם', 'אריאל', 'מעלה אדומים', 'בית שמש', 'אלעד', 'טמרה',
    'קריית מלאכי', 'מגדל', 'יקנעם', 'נוף הגליל', 'קצרין', 'מטולה', 'ראש פינה',
]

PROFESSION_KEYWORDS = [
    'מפתח', 'מתכנת', 'מהנדס', 'מעצב', 'רופא', 'עורך דין', 'רואה חשבון',
    'מנהל', 'סמנכ"ל', 'מנכ"ל', 'יועץ', 'אדריכל', 'מורה', 'מרצה',
    'developer', 'engineer', 'designer', 'manager', 'analyst', 'consultant',
]

GENDER_KEYWORDS = ['זכר', 'נקבה', 'גבר', 'אישה', 'male', 'female', 'man', 'woman']

MARITAL_KEYWORDS = [
    'נשוי', 'רווק', 'גרוש', 'אלמן', 'נשואה', 'רווקה', 'גרושה', 'אלמנה',
    'married', 'single', 'divorced', 'widowed',
]

ACHIEVEMENT_KEYWORDS = ['הישגים', 'פרסים', 'הכרה', 'הצטיינות', 'achievements', 'awards', 'recognition']

DRIVING_LICENSE_YES = "כן"

# Digit runs are bounded by non-alphanumerics (Hebrew letters count as separators)
_NO_DIGIT_BEFORE = r"(?<![0-9A-Za-z_])"
_NO_DIGIT_AFTER = r"(?![0-9A-Za-z_])"

EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z]{2,})")
MOBILE_PATTERN = re.compile(_NO_DIGIT_BEFORE + r"(05\d[-\s]?\d{3}[-\s]?\d{4})" + _NO_DIGIT_AFTER)
LANDLINE_PATTERN = re.compile(_NO_DIGIT_BEFORE + r"(0[3489][-\s]?\d{7})" + _NO_DIGIT_AFTER)
ANY_LANDLINE_PATTERN = re.compile(_NO_DIGIT_BEFORE + r"(0[2-9][-\s]?\d{7})" + _NO_DIGIT_AFTER)
STREET_PATTERN = re.compile(r"(?:רחוב|רח['\"]|דרך|שדרות|שד['\"])\s*([א-ת\s]+)\s*(\d+)")
ZIP_PATTERN = re.compile(_NO_DIGIT_BEFORE + r"(\d{5,7})" + _NO_DIGIT_AFTER)
NATIONAL_ID_PATTERN = re.compile(_NO_DIGIT_BEFORE + r"(\d{9})" + _NO_DIGIT_AFTER)
LABELED_NAME_PATTERN = re.compile(r"(?<![א-ת])שם\s*:?\s*([א-ת]{2,})\s+([א-ת]{2,})")
LATIN_NAME_PATTERN = re.compile(r"\b([A-Z][a-z]+)[ \t]+([A-Z][a-z]+)\b")
HEBREW_NAME_PATTERN = re.compile(r"(?<![א-ת])([א-ת]{2,})[ \t]+([א-ת]{2,})(?![א-ת])")
EXPERIENCE_PATTERN = re.compile(
    r"(?<!\d)(\d{1,2})\s*(?:שנ(?:ה|ות|ים)?\s*(?:של\s*)?(?:ניסיון|עבודה)|years?\s*(?:of\s*)?experience)",
    re.IGNORECASE,
)
DRIVING_LICENSE_PATTERN = re.compile(
    r"רי?שיון\s*נהיגה|(?<![א-ת])ר\.\s?נ\.?(?![א-ת])|driving\s*licen[cs]e",
    re.IGNORECASE,
)

_PHONE_SEPARATORS = re.compile(r"[-\s]")


def _digits(value: str) -> str:
    return _PHONE_SEPARATORS.sub("", value)


def _contains_keyword(text: str, keyword: str) -> bool:
    """Latin keywords match whole words only ("male" is not in "female")."""
    if keyword.isascii():
        return re.search(r"(?<![a-z])" + re.escape(keyword) + r"(?![a-z])", text) is not None
    return keyword in text


def _first_keyword(text: str, vocabulary: List[str], whole_words: bool = False) -> str:
    lowered = text.lower()
    for keyword in vocabulary:
        if whole_words:
            if _contains_keyword(lowered, keyword.lower()):
                return keyword
        elif keyword.lower() in lowered:
            return keyword
    return ""


# ---------------------------------------------------------------------------
# Rules. Each takes the scoped text plus the fields found so far and returns
# the fields it sets (an empty dict when nothing matched).
# ---------------------------------------------------------------------------

def _email(text: str, found: Dict) -> Dict:
    match = EMAIL_PATTERN.search(text)
    return {"email": match.group(1)} if match else {}


def _mobile(text: str, found: Dict) -> Dict:
    match = MOBILE_PATTERN.search(text)
    return {"mobile": _digits(match.group(1))} if match else {}


def _landline(text: str, found: Dict) -> Dict:
    match = LANDLINE_PATTERN.search(text)
    return {"phone": _digits(match.group(1))} if match else {}


def _city(text: str, found: Dict) -> Dict:
    for city in ISRAELI_CITIES:
        if city in text:
            return {"city": city}
    return {}


def _street(text: str, found: Dict) -> Dict:
    match = STREET_PATTERN.search(text)
    if not match:
        return {}
    return {"street": match.group(1).strip(), "house_number": match.group(2)}


def _zip_code(text: str, found: Dict) -> Dict:
    phones = [found.get("mobile", ""), found.get("phone", "")]
    phones += [_digits(m.group(1)) for m in ANY_LANDLINE_PATTERN.finditer(text)]
    for match in ZIP_PATTERN.finditer(text):
        candidate = match.group(1)
        if any(phone and candidate in phone for phone in phones):
            continue
        return {"zip_code": candidate}
    return {}


def _national_id(text: str, found: Dict) -> Dict:
    match = NATIONAL_ID_PATTERN.search(text)
    return {"national_id": match.group(1)} if match else {}


def _name(text: str, found: Dict) -> Dict:
    for pattern in (LABELED_NAME_PATTERN, LATIN_NAME_PATTERN, HEBREW_NAME_PATTERN):
        match = pattern.search(text)
        if match:
            return {"first_name": match.group(1), "last_name": match.group(2)}
    return {}


def _secondary_phone(text: str, found: Dict) -> Dict:
    matches = [_digits(m.group(1)) for m in ANY_LANDLINE_PATTERN.finditer(text)]
    if len(matches) > 1 and matches[1] != found.get("phone"):
        return {"phone2": matches[1]}
    return {}


def _profession(text: str, found: Dict) -> Dict:
    keyword = _first_keyword(text, PROFESSION_KEYWORDS)
    return {"profession": keyword} if keyword else {}


def _experience(text: str, found: Dict) -> Dict:
    match = EXPERIENCE_PATTERN.search(text)
    return {"experience": int(match.group(1))} if match else {}


def _gender(text: str, found: Dict) -> Dict:
    keyword = _first_keyword(text, GENDER_KEYWORDS, whole_words=True)
    return {"gender": keyword} if keyword else {}


def _marital_status(text: str, found: Dict) -> Dict:
    keyword = _first_keyword(text, MARITAL_KEYWORDS, whole_words=True)
    return {"marital_status": keyword} if keyword else {}


def _driving_license(text: str, found: Dict) -> Dict:
    return {"driving_license": DRIVING_LICENSE_YES} if DRIVING_LICENSE_PATTERN.search(text) else {}


def _achievements(text: str, found: Dict) -> Dict:
    keyword = _first_keyword(text, ACHIEVEMENT_KEYWORDS)
    if not keyword:
        return {}
    start = re.search(re.escape(keyword), text, re.IGNORECASE).start()
    return {"achievements": text[start:start + ACHIEVEMENT_WINDOW].strip()}


@dataclass(frozen=True)
class FieldRule:
    name: str
    fields: Tuple[str, ...]
    scope: str
    apply: Callable[[str, Dict], Dict]


FIELD_RULES: List[FieldRule] = [
    FieldRule("email", ("email",), SCOPE_HEAD, _email),
    FieldRule("mobile", ("mobile",), SCOPE_HEAD, _mobile),
    FieldRule("landline", ("phone",), SCOPE_HEAD, _landline),
    FieldRule("city", ("city",), SCOPE_FULL, _city),
    FieldRule("street", ("street", "house_number"), SCOPE_HEAD, _street),
    FieldRule("zip_code", ("zip_code",), SCOPE_HEAD, _zip_code),
    FieldRule("name", ("first_name", "last_name"), SCOPE_HEAD, _name),
    FieldRule("profession", ("profession",), SCOPE_FULL, _profession),
    FieldRule("experience", ("experience",), SCOPE_FULL, _experience),
    FieldRule("national_id", ("national_id",), SCOPE_HEAD, _national_id),
    FieldRule("gender", ("gender",), SCOPE_FULL, _gender),
    FieldRule("marital_status", ("marital_status",), SCOPE_FULL, _marital_status),
    FieldRule("driving_license", ("driving_license",), SCOPE_FULL, _driving_license),
    FieldRule("secondary_phone", ("phone2",), SCOPE_HEAD, _secondary_phone),
    FieldRule("achievements", ("achievements",), SCOPE_FULL, _achievements),
]

RULES_BY_NAME = {rule.name: rule for rule in FIELD_RULES}


def head_window(text: str) -> str:
    return text[: int(len(text) * HEAD_WINDOW_RATIO)]


def apply_rule(rule: FieldRule, text: str, found: Optional[Dict] = None) -> Dict:
    """Run a single rule against `text`, honouring its scope."""
    scoped = head_window(text) if rule.scope == SCOPE_HEAD else text
    return rule.apply(scoped, found or {})


def extract_fields(text: str) -> ExtractedFields:
    """
    Guess candidate fields from CV text.

    Deterministic and total: empty, binary or unrecognisable text yields an
    all-empty ExtractedFields.
    """
    if not isinstance(text, str) or not text.strip():
        return ExtractedFields()

    head = head_window(text)
    found: Dict = {}
    for rule in FIELD_RULES:
        scoped = head if rule.scope == SCOPE_HEAD else text
        found.update(rule.apply(scoped, found))

    return ExtractedFields(**found)
