"""Script detection and script-aware cleanup of recognized text.

``cleanup`` is idempotent: every rule either shortens the text or maps it to
a form no rule matches again, and the rules are re-applied until the text
stops changing.
"""

import re
from dataclasses import replace
from functools import lru_cache

from textvision.documents.models import PageRecognitionResult, ScriptDetection
from textvision.language.scripts import DEVANAGARI, ScriptProfile
from textvision.language.text import count_words, normalize_whitespace
from textvision.logging.logger import Log

DEFAULT_THRESHOLD_PERCENT = 10.0


def detect_script(
    text: str,
    script: ScriptProfile = DEVANAGARI,
    threshold: float = DEFAULT_THRESHOLD_PERCENT,
) -> ScriptDetection:
    """Share of ``script`` characters among all characters of ``text``."""
    total = len(text)
    script_chars = sum(1 for char in text if script.contains(char))
    percentage = round(script_chars / total * 100, 2) if total else 0.0
    return ScriptDetection(
        script=script.name,
        is_target_script=percentage > threshold,
        percentage=percentage,
        script_chars=script_chars,
        total_chars=total,
    )


def contains_script(text: str, script: ScriptProfile = DEVANAGARI) -> bool:
    return any(script.contains(char) for char in text)


def cleanup(text: str, script: ScriptProfile | None = None) -> str:
    """Normalize whitespace and, when a script is given, apply its OCR repairs."""
    while True:
        cleaned = _cleanup_pass(text, script)
        if cleaned == text:
            return cleaned
        text = cleaned


def _cleanup_pass(text: str, script: ScriptProfile | None) -> str:
    text = normalize_whitespace(text)
    if script is None:
        return text
    text = _detached_marks(script).sub("", text)
    for pattern, replacement in script.pattern_repairs:
        text = pattern.sub(replacement, text)
    for wrong, right in script.repairs:
        text = text.replace(wrong, right)
    return text


@lru_cache(maxsize=None)
def _detached_marks(script: ScriptProfile) -> re.Pattern[str]:
    # Whitespace wedged between a base character and its combining mark.
    return re.compile(f"(?<=[{script.char_class}])\\s+(?=[{script.marks}])")


class LanguagePostProcessor:
    """Applies script detection and cleanup to per-page recognition results."""

    def __init__(
        self,
        script: ScriptProfile = DEVANAGARI,
        threshold: float = DEFAULT_THRESHOLD_PERCENT,
    ) -> None:
        self._script = script
        self._threshold = threshold

    def detect(self, text: str) -> ScriptDetection:
        return detect_script(text, self._script, self._threshold)

    def process(self, page: PageRecognitionResult) -> PageRecognitionResult:
        """Return a cleaned copy of ``page``; failed pages are returned unchanged."""
        if page.failed or not page.text:
            return page
        detection = self.detect(page.text)
        script = self._script if detection.is_target_script else None
        text = cleanup(page.text, script)
        if detection.is_target_script:
            Log.debug(
                f"Page {page.page_number}: {detection.percentage}% {self._script.name}, "
                "applied script repairs"
            )
        return replace(page, text=text, word_count=count_words(text))
