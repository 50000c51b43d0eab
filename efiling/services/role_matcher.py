"""
Role-group matching rules

Single home for the role-code pattern rules used by stage authorization,
next-stage selection and role-group administration.
"""

import json
from typing import Iterable, List, Optional

SHORT_CODE_MAX_LENGTH = 4


def normalize_role_codes(value) -> List[str]:
    """
    Normalize stored role codes to a list of trimmed, non-empty strings.

    Accepts a list, a JSON-encoded list, or a comma-separated string.
    """
    if value is None:
        return []

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                value = raw.strip("[]").split(",")
        else:
            value = raw.split(",")

    if not isinstance(value, (list, tuple, set)):
        value = [value]

    codes = []
    for item in value:
        if item is None:
            continue
        code = str(item).strip().strip('"').strip("'").strip()
        if code:
            codes.append(code)
    return codes


def pattern_matches(role_code: str, pattern: str) -> bool:
    """Match one role code against one pattern, case-insensitively"""
    candidate = (role_code or "").strip().upper()
    rule = (pattern or "").strip().upper()

    if not candidate or not rule:
        return False

    if rule.endswith("*"):
        return candidate.startswith(rule[:-1])

    # Short codes such as "EE" intentionally match any role containing them
    if len(rule) <= SHORT_CODE_MAX_LENGTH:
        return rule in candidate

    return candidate == rule


def matches(role_code: Optional[str], patterns: Optional[Iterable[str]]) -> bool:
    """
    Return True when the role code satisfies any pattern of a role group.

    - "EE*"  prefix match: EEXEN yes, XEE no
    - "EE"   short code (<= 4 chars) substring match: SEEXEN yes, XX no
    - "EEXEN_SAF" exact match
    """
    if not role_code:
        return False

    return any(pattern_matches(role_code, pattern) for pattern in normalize_role_codes(patterns))
