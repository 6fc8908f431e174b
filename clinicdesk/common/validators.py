"""Input validation helpers for registration and staff forms."""
from datetime import datetime

GENDERS = ('Male', 'Female', 'Other')


def validate_mobile_no(phone: str) -> bool:
    """
    Mobile numbers are 11 digits starting with 03; a single dash after the
    operator code is allowed.

    Examples:
        >>> validate_mobile_no('0304-4444444')
        True
        >>> validate_mobile_no('03044444444')
        True
        >>> validate_mobile_no('304-4444444')
        False
    """
    if not phone:
        return False

    digits = phone.replace('-', '', 1)
    if len(digits) != 11 or not digits.isdigit():
        return False

    return digits.startswith('03')


def validate_dob(dob: str) -> bool:
    """Date of birth as YYYY-MM-DD, not in the future."""
    if not dob:
        return False
    try:
        parsed = datetime.strptime(dob, '%Y-%m-%d')
    except ValueError:
        return False
    return parsed <= datetime.now()


def validate_gender(gender: str) -> bool:
    return gender in GENDERS
