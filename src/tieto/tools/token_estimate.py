"""
Token count estimation without a tokenizer.

Approximates subword tokenizers: short words are one token, longer words
split into pieces, code operators count as single tokens, and quoted
strings cost roughly one token per four characters.
"""

import string
from dataclasses import dataclass


CODE_PATTERNS = (
    "/**", "->", "++", "--", "==", "!=", "<=", ">=", "&&", "||",
    "<<", ">>", "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=",
    "::", "//", "/*", "*/", "{", "}", "[", "]", "(", ")", ";",
)

CODE_BRACKETS = set("{};()[]")


@dataclass
class TokenStats:
    """Token, word, and character counts for a text."""
    tokens: int = 0
    words: int = 0
    chars: int = 0

    @property
    def chars_per_token(self) -> float:
        return self.chars / self.tokens if self.tokens else 0.0


def _code_pattern_length(text: str, pos: int) -> int:
    for pattern in CODE_PATTERNS:
        if text.startswith(pattern, pos):
            return len(pattern)
    return 0


def _word_tokens(length: int) -> int:
    if length <= 4:
        return 1
    if length <= 8:
        return 2
    return (length + 3) // 4


def estimate_tokens(text: str) -> TokenStats:
    """Estimate tokens by scanning words, numbers, strings and symbols."""
    stats = TokenStats(chars=len(text))
    length = len(text)
    i = 0

    while i < length:
        c = text[i]

        if c.isspace():
            i += 1
            continue

        pattern_len = _code_pattern_length(text, i)
        if pattern_len:
            stats.tokens += 1
            i += pattern_len
            continue

        if c.isalpha():
            start = i
            while i < length and (text[i].isalnum() or text[i] == "_"):
                i += 1
            stats.words += 1
            stats.tokens += _word_tokens(i - start)

        elif c.isdigit():
            while i < length and (text[i].isdigit() or text[i] == "."):
                i += 1
            stats.tokens += 1

        elif c in "\"'":
            quote = c
            i += 1
            stats.tokens += 1
            string_chars = 0
            while i < length and text[i] != quote:
                if text[i] == "\\" and i + 1 < length:
                    i += 2
                    string_chars += 2
                else:
                    i += 1
                    string_chars += 1
            stats.tokens += (string_chars + 3) // 4
            if i < length:
                i += 1
                stats.tokens += 1

        else:
            stats.tokens += 1
            i += 1

    return stats


def estimate_tokens_advanced(text: str) -> int:
    """Adjust the basic estimate for code-like versus prose-like text."""
    basic = estimate_tokens(text)

    code_indicators = 0
    for i in range(len(text) - 1):
        if text[i] in CODE_BRACKETS and (i == 0 or not text[i - 1].isalpha()):
            code_indicators += 1

    multiplier = 1.0
    if code_indicators > basic.words // 10:
        multiplier = 1.2
    if code_indicators < basic.words // 20 and basic.words > 10:
        multiplier = 0.85

    return int(basic.tokens * multiplier)


def quick_token_estimate(text: str) -> int:
    """About 4 characters per token for prose, 3 for code."""
    length = len(text)
    if length == 0:
        return 0

    punctuation = sum(1 for c in text if c in string.punctuation)
    if punctuation > length // 20:
        return (length + 2) // 3
    return (length + 3) // 4
