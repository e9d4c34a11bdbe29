"""Approximate LLM token counts."""

from __future__ import annotations


def estimate_tokens(text: str) -> int:
    """Estimate the number of tokens in ``text``.

    A run of letters, digits or underscores counts as one token. Every other
    non-whitespace character counts as one token on its own.

    Examples:
        >>> estimate_tokens("hello world")
        2
        >>> estimate_tokens("a.b.c")
        5
    """
    count = 0
    in_word = False
    for char in text:
        if char.isalnum() or char == "_":
            if not in_word:
                count += 1
                in_word = True
        else:
            in_word = False
            if not char.isspace():
                count += 1
    return count
