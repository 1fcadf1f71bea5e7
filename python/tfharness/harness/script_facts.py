"""
tfharness/harness/script_facts.py

Pulls named values out of generated script text by matching the fixed skeleton
around them.

Generated scripts come from template expansion, so the only reliable way to
check that a value landed in the right place is to match the surrounding
statements and capture the dynamic part. Patterns are compiled with MULTILINE
and DOTALL: '^'/'$' anchor individual lines and '.*?' may cross lines, so a
pattern can step over intervening skeleton lines while still requiring every
anchor line to be present.

A skeleton that does not match yields None rather than an empty value, so
"script has the wrong shape" stays distinguishable from "value is wrong".
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Optional, Pattern, Union

FACT_PATTERN_FLAGS = re.MULTILINE | re.DOTALL


class FactPattern:
    """A compiled skeleton pattern with at least one named group.

    Attributes:
        regex (Pattern[str]): The compiled expression.
        groups (tuple): The named groups the pattern captures.
    """

    def __init__(self, pattern: Union[str, Pattern[str]]) -> None:
        """
        Compile a skeleton pattern.

        Args:
            pattern: Pattern text (compiled with MULTILINE | DOTALL) or an
                already compiled expression, used unchanged.

        Raises:
            ValueError: If the pattern captures no named groups.
        """
        self.regex: Pattern[str] = (
            pattern
            if isinstance(pattern, re.Pattern)
            else re.compile(pattern, FACT_PATTERN_FLAGS)
        )
        if not self.regex.groupindex:
            raise ValueError(
                f"Fact pattern has no named groups: {self.regex.pattern!r}"
            )
        self.groups = tuple(self.regex.groupindex)

    def __repr__(self) -> str:
        return f"FactPattern({self.regex.pattern!r})"


PatternLike = Union[FactPattern, Pattern[str], str]


def _as_fact_pattern(pattern: PatternLike) -> FactPattern:
    return pattern if isinstance(pattern, FactPattern) else FactPattern(pattern)


def extract_facts(
    script: Optional[str], pattern: PatternLike
) -> Optional[Dict[str, str]]:
    """Match a skeleton against a script and return its named captures.

    Args:
        script (Optional[str]): The script text. None yields None, so a missing
            resource attribute can be passed straight through.
        pattern (PatternLike): The skeleton to match.

    Returns:
        Optional[Dict[str, str]]: Named group -> captured text for the first
            match, or None if the skeleton does not match. Optional groups that
            did not participate are left out.
    """
    if script is None:
        return None
    found = _as_fact_pattern(pattern).regex.search(script)
    if found is None:
        return None
    return {key: val for key, val in found.groupdict().items() if val is not None}


def find_line(lines: Iterable[str], pattern: Union[str, Pattern[str]]) -> Optional[str]:
    """Return the first line that fully matches pattern, or None.

    Meant for lines from normalized_lines(), e.g.
    find_line(lines, r'\\$moduleVersion = "\\d{4}\\.\\d+\\.\\d+"').
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    for line in lines:
        if regex.fullmatch(line):
            return line
    return None
