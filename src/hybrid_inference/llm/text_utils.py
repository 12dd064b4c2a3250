"""
Text processing utilities for the routing layer.

Token estimation for admission control and parsing of the local
summariser's key-point output.
"""

import math
import re

from hybrid_inference.models.output_models import MAX_KEY_POINTS


_BULLET_PREFIX = re.compile(r"^(?:[•\-\*]|\d+[.)])\s*")


def estimate_token_count(text: str, chars_per_token: int = 4) -> int:
    """
    Rough approximation of token count for text.

    Uses a fixed characters-per-token divisor, rounded up. This is NOT a
    tokenizer; it is a conservative pre-flight proxy for admission control.

    Args:
        text: Text to estimate tokens for
        chars_per_token: Divisor (4 for English)

    Returns:
        Approximate token count

    Examples:
        >>> estimate_token_count("abcde")
        2
        >>> estimate_token_count("")
        0
    """
    return math.ceil(len(text) / chars_per_token)


def parse_key_points(text: str, limit: int = MAX_KEY_POINTS) -> list[str]:
    """
    Split summariser output into key points.

    One point per non-blank line, with leading bullets (•, -, *) or
    numbering removed, limited to the first `limit` points.

    Examples:
        >>> parse_key_points("• First\\n\\n- Second\\n* Third")
        ['First', 'Second', 'Third']
    """
    points = []
    for line in text.splitlines():
        line = _BULLET_PREFIX.sub("", line.strip()).strip()
        if line:
            points.append(line)
    return points[:limit]
