"""Unicode script profiles used for detection and OCR repair."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ScriptProfile:
    """A writing system: its code-point ranges, combining marks and OCR repair table.

    ``repairs`` is applied in order as literal substitutions; ``pattern_repairs``
    as regular-expression substitutions.
    """

    name: str
    ranges: tuple[tuple[int, int], ...]
    marks: str
    repairs: tuple[tuple[str, str], ...] = ()
    pattern_repairs: tuple[tuple[re.Pattern[str], str], ...] = ()

    def contains(self, char: str) -> bool:
        code = ord(char)
        return any(low <= code <= high for low, high in self.ranges)

    @property
    def char_class(self) -> str:
        """Regex character class body matching the script's ranges."""
        return "".join(f"\\u{low:04x}-\\u{high:04x}" for low, high in self.ranges)


# Dependent vowel signs, virama, nukta, candrabindu/anusvara/visarga and stress marks.
_DEVANAGARI_MARKS = (
    "\u0900-\u0903"
    "\u093a-\u093c"
    "\u093e-\u094f"
    "\u0951-\u0957"
    "\u0962-\u0963"
)

DEVANAGARI = ScriptProfile(
    name="devanagari",
    ranges=((0x0900, 0x097F),),
    marks=_DEVANAGARI_MARKS,
    repairs=(
        # Independent vowel split into a + dependent sign.
        ("\u0905\u093e", "\u0906"),  # अ + ा -> आ
        ("\u0905\u094b", "\u0913"),  # अ + ो -> ओ
        ("\u0905\u094c", "\u0914"),  # अ + ौ -> औ
        ("\u090f\u0947", "\u0910"),  # ए + े -> ऐ
        # o/au signs split into aa + e/ai.
        ("\u093e\u0947", "\u094b"),  # ा + े -> ो
        ("\u093e\u0948", "\u094c"),  # ा + ै -> ौ
        ("\u0964\u0964", "\u0965"),  # ।। -> ॥
    ),
    pattern_repairs=(
        # Doubled combining marks.
        (re.compile(f"([{_DEVANAGARI_MARKS}])\\1+"), r"\1"),
        # Danda read as a pipe after Devanagari text.
        (re.compile(r"(?<=[\u0900-\u097f])( ?)\|"), "\\1\u0964"),
    ),
)

SCRIPTS: dict[str, ScriptProfile] = {
    DEVANAGARI.name: DEVANAGARI,
}


def get_script(name: str) -> ScriptProfile:
    try:
        return SCRIPTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown script '{name}'. Choose from: {sorted(SCRIPTS)}") from None
