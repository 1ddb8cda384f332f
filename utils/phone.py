"""
Israeli phone number normalization.

The same rule exists twice: `normalize_phone` for values coming from
application code, and `normalized_phone_sql` for values already stored,
so that comparisons can run inside the database.
"""

import re
from typing import Optional

import sqlalchemy as sa

_SEPARATORS = re.compile(r"[-\s()]")


def normalize_phone(phone: Optional[str]) -> str:
    """
    Normalize a phone number to the local 0XXXXXXXXX format.

    - strips '-', whitespace and parentheses
    - '+972' / '972' international prefix becomes a leading '0'
    - a 9-digit number without the leading '0' gets one

    Idempotent: normalize_phone(normalize_phone(x)) == normalize_phone(x).
    """
    if not phone:
        return ""
    normalized = _SEPARATORS.sub("", phone)

    if normalized.startswith("+972"):
        normalized = "0" + normalized[4:]
    elif normalized.startswith("972"):
        normalized = "0" + normalized[3:]

    if len(normalized) == 9 and not normalized.startswith("0"):
        normalized = "0" + normalized

    return normalized


def normalized_phone_sql(column):
    """Build the SQL expression applying `normalize_phone` to a stored column."""
    stripped = column
    for separator in ("-", " ", "(", ")"):
        stripped = sa.func.replace(stripped, separator, "")

    zero = sa.literal("0", type_=sa.String())
    return sa.case(
        (stripped.like("+972%"), zero.concat(sa.func.substr(stripped, 5))),
        (stripped.like("972%"), zero.concat(sa.func.substr(stripped, 4))),
        (
            sa.and_(sa.func.length(stripped) == 9, sa.not_(stripped.like("0%"))),
            zero.concat(stripped),
        ),
        else_=stripped,
    )
