import re
import unicodedata

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_LINE_EDGE_SPACES = re.compile(r" *\n *")
_BLANK_LINE_RUNS = re.compile(r"\n{3,}")


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens."""
    return len(text.split())


def normalize_whitespace(text: str) -> str:
    """NFC-normalize, collapse space runs and collapse blank-line runs to one blank line."""
    text = unicodedata.normalize("NFC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _LINE_EDGE_SPACES.sub("\n", text)
    text = _BLANK_LINE_RUNS.sub("\n\n", text)
    return text.strip()
