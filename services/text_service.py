"""
Text service: normalizes raw chat messages into answers

The engine only ever compares normalized text, so the same function is used
for player input and for the accepted variants in the reference data.
"""
import re
import unicodedata

_NOT_WORD = re.compile(r"[^\w\s]", re.UNICODE)
_SPACES = re.compile(r"\s+")


def normalize_answer(raw_text: str) -> str:
    """
    Lower-case a message and strip its punctuation

    Rules:
    - curly quotes and accents are folded first (don’t -> dont, café -> cafe)
    - punctuation is removed, not replaced (can't -> cant, ...ready -> ready)
    - underscores count as punctuation
    - runs of whitespace collapse into one space

    Examples:
        normalize_answer("Mr. Perfectly Fine!") -> "mr perfectly fine"
        normalize_answer("  'tis the damn   season ") -> "tis the damn season"
    """
    text = unicodedata.normalize("NFKD", raw_text)
    text = "".join(char for char in text if not unicodedata.combining(char))
    text = _NOT_WORD.sub("", text.lower()).replace("_", "")
    return _SPACES.sub(" ", text).strip()
