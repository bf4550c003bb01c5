"""
Pattern Compiler Utility

Centralizes regex pattern compilation with ReDoS safety checks.

SECURITY STORY: Address validation runs on caller-supplied input, often
straight from a web form. A pattern with nested quantifiers can be driven
into catastrophic backtracking by a crafted string, so every validation
pattern is compiled through these helpers and rejected at import time if it
carries a known ReDoS signature.
"""

import re
from typing import List

# Known ReDoS signatures: nested or repeated quantifiers on unbounded character
# classes are the most common source of catastrophic backtracking.
_REDOS_SIGNATURES: List[str] = [
    r"(\w+)*",
    r"(\d+)+",
    r"(\s+)*",
    r"(a+)+",
    r"([a-zA-Z]+)*",
    r"(.+)+",
    r"(.*)*",
]


def check_redos_safety(patterns: List[str]) -> None:
    """
    Raise ValueError if any pattern contains a known ReDoS signature.

    This is a lightweight static check, not a full ReDoS prover. Detection
    uses substring matching against a fixed signature list, so a signature
    anywhere in a pattern string triggers the check.

    Args:
        patterns: List of regex pattern strings to inspect.

    Raises:
        ValueError: If any pattern contains a known ReDoS signature.
    """
    for pattern in patterns:
        for unsafe in _REDOS_SIGNATURES:
            if unsafe in pattern:
                raise ValueError(f"Potential ReDoS in pattern: {pattern!r}")


def compile_pattern(
    pattern: str,
    flags: int = 0,
    validate_redos: bool = True,
) -> re.Pattern:
    """
    Compile a single regex pattern after the ReDoS check.

    Args:
        pattern: Regex pattern string.
        flags: Regex compilation flags (default: none, matching is case-sensitive).
        validate_redos: If ``True``, run ``check_redos_safety`` before compiling.

    Returns:
        The compiled :class:`re.Pattern`.
    """
    if validate_redos:
        check_redos_safety([pattern])
    return re.compile(pattern, flags)
