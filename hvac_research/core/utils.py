"""
Shared utilities.
"""
import re
from datetime import date, datetime
from typing import Optional


def clean_business_name(text: str) -> str:
    """
    Clean a business name pulled out of free-form research output.
    """
    if not text:
        return ""

    s = text.strip()

    # Markdown emphasis and list bullets from research reports
    s = re.sub(r'^[\-\*•\s]+', '', s)
    s = s.replace("**", "").replace("__", "")
    s = s.strip("[]").strip()

    # Common separators in directory titles
    separators = [" - ", " | ", " : ", " – "]
    for sep in separators:
        if sep in s:
            s = s.split(sep)[0]

    return s.strip()


def normalize_name(name: str) -> str:
    """
    Normalize business name for deduplication.
    - Lowercase
    - Remove accents
    - Remove punctuation
    - Remove legal suffixes
    """
    import unicodedata
    import string

    if not name:
        return ""

    s = name.lower().strip()
    s = unicodedata.normalize('NFKD', s).encode('ASCII', 'ignore').decode('utf-8')
    s = s.translate(str.maketrans('', '', string.punctuation))

    suffixes = ["llc", "inc", "incorporated", "corporation", "corp", "co", "company", "ltd", "lp", "llp", "pllc"]

    words = s.split()
    while len(words) > 1 and words[-1] in suffixes:
        words.pop()

    return " ".join(words)


def normalize_url(url: Optional[str]) -> str:
    """Strip scheme, www and trailing slash so URLs compare equal."""
    if not url:
        return ""
    return url.lower().replace("https://", "").replace("http://", "").replace("www.", "").strip("/")


def parse_date(value) -> Optional[date]:
    """
    Parse a date from research output or API payloads.
    Accepts date/datetime objects, ISO strings and US-style MM/DD/YYYY.
    Returns None for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value).strip()
    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d", "%B %d, %Y", "%b %d, %Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def one_year_before(as_of: date) -> date:
    """Same calendar day one year earlier (Feb 29 maps to Feb 28)."""
    try:
        return as_of.replace(year=as_of.year - 1)
    except ValueError:
        return as_of.replace(year=as_of.year - 1, day=28)
