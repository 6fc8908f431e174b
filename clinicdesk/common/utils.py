import dataclasses
import random
import re
from datetime import date, datetime, timedelta

DB_DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'

_MRN_PREFIXED = re.compile(r'^mrn(\d+)$', re.IGNORECASE)


def clinic_now() -> datetime:
    """Current local time as a naive datetime, the form every timestamp is stored in."""
    return datetime.now().replace(microsecond=0)


def parse_datetime(dt: datetime | str | None) -> datetime | None:
    """
    Parse a stored or user-supplied timestamp.
    Accepts datetime objects, 'YYYY-MM-DD HH:MM:SS', 'YYYY-MM-DD' and ISO 8601
    strings (with 'T' and an optional offset). Aware values are converted to
    local time and made naive so they compare with stored values.
    """
    if dt is None:
        return None

    if isinstance(dt, datetime):
        parsed = dt
    elif isinstance(dt, str):
        text = dt.strip()
        if not text:
            return None
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_db_datetime(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.strftime(DB_DATETIME_FORMAT)


def day_bounds(day: date) -> tuple[str, str]:
    """[start, end) of a calendar day as stored timestamp strings."""
    start = datetime(day.year, day.month, day.day)
    return format_db_datetime(start), format_db_datetime(start + timedelta(days=1))


def canonical_mrn(value: str | None) -> str | None:
    """
    Canonical form of a medical record number, or None when the text is not one.

    >>> canonical_mrn('12')
    'MRN0012'
    >>> canonical_mrn('mrn7')
    'MRN0007'
    >>> canonical_mrn('Faiza') is None
    True
    """
    if not value:
        return None
    text = value.strip()
    if text.isdigit():
        return f"MRN{text.zfill(4)}"
    match = _MRN_PREFIXED.match(text)
    if match:
        return f"MRN{match.group(1).zfill(4)}"
    return None


def format_mrn(number: int) -> str:
    return f"MRN{number:04d}"


def mrn_candidates(identifier: str) -> list[str]:
    """
    Lookup keys for a human-entered patient identifier, in match order:
    the text itself, then the zero-padded forms of a bare number or an
    'mrn'-prefixed number.
    """
    text = (identifier or '').strip()
    if not text:
        return []
    candidates = [text]
    if text.isdigit():
        candidates.append(f"MRN{text.zfill(4)}")
    match = _MRN_PREFIXED.match(text)
    if match:
        candidates.append(f"MRN{match.group(1).zfill(4)}")
    seen = set()
    unique = []
    for c in candidates:
        if c.lower() not in seen:
            seen.add(c.lower())
            unique.append(c)
    return unique


def generate_appointment_no(year: int) -> str:
    """Display label only; collisions are possible and harmless."""
    return f"AP{year}-{random.randint(0, 9999):04d}"


def calculate_age(dob: str | None, today: date | None = None) -> int | None:
    parsed = parse_datetime(dob)
    if parsed is None:
        return None
    today = today or date.today()
    age = today.year - parsed.year
    if (today.month, today.day) < (parsed.month, parsed.day):
        age -= 1
    return age


def to_json(value):
    """Convert dataclasses (and containers of them) to JSON-friendly structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)
                if f.metadata.get('private') is not True}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value
