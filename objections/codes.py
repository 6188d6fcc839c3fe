"""
Objection code generation.

Format: OBJ-{4 digits}, suffix 1000-9999
Example: OBJ-4821
"""

import re
import secrets

CODE_PREFIX = "OBJ"
_CODE_PATTERN = re.compile(r"^OBJ-[1-9][0-9]{3}$")


def generate_objection_code() -> str:
    """Generate a random objection code. Uniqueness is enforced by the database."""
    return f"{CODE_PREFIX}-{1000 + secrets.randbelow(9000)}"


def is_objection_code_valid(code: str) -> bool:
    """Validate objection code format."""
    if not code:
        return False
    return bool(_CODE_PATTERN.match(code))
