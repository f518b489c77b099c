"""
Cosmetic capitalization for seller-entered text.

The behaviour is driven entirely by ``TextFormattingRules`` so the tables can
be swapped without touching the formatter.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

_WHITESPACE = re.compile(r"\s+")
_HAS_DIGIT = re.compile(r"\d")


def _canonical_table(words: Iterable[str]) -> dict[str, str]:
    return {word.lower(): word for word in words}


@dataclass(frozen=True)
class TextFormattingRules:
    # Canonical spelling wins for these, e.g. "abs" -> "ABS", "kw" -> "kW"
    abbreviations: dict[str, str] = field(default_factory=dict)
    brand_names: dict[str, str] = field(default_factory=dict)
    # Kept lowercase unless first word
    minor_words: frozenset[str] = frozenset()

    @classmethod
    def from_lists(
        cls,
        *,
        abbreviations: Iterable[str] = (),
        brand_names: Iterable[str] = (),
        minor_words: Iterable[str] = (),
    ) -> "TextFormattingRules":
        return cls(
            abbreviations=_canonical_table(abbreviations),
            brand_names=_canonical_table(brand_names),
            minor_words=frozenset(w.lower() for w in minor_words),
        )


DEFAULT_RULES = TextFormattingRules.from_lists(
    abbreviations=[
        "SUV", "MPV", "LPG", "CNG", "ABS", "ESP", "GPS", "DVD", "CD", "USB", "HD",
        "4WD", "AWD", "RWD", "V6", "V8", "V12", "TDI", "TSI", "GTI", "RS", "AMG",
        "M3", "M5", "X5", "X6", "Q7", "Q8", "CR-V", "HR-V", "X-Trail", "CX-5",
        "CX-30", "RAV4", "HP", "kW", "Nm", "RPM", "cc", "km/h", "mph", "kg",
        "lbs", "mm", "cm", "A/C", "AC", "TV", "PC", "CPU", "RAM", "SSD", "HDD",
        "BMW",
    ],
    brand_names=[
        "Audi", "Mercedes", "Volkswagen", "Toyota", "Honda", "Nissan", "Mazda",
        "Ford", "Chevrolet", "Hyundai", "Kia", "Volvo", "Jaguar", "Jeep", "Dodge",
    ],
    minor_words=[
        "a", "an", "and", "as", "at", "but", "by", "for", "if", "in", "is", "it",
        "no", "not", "of", "on", "or", "so", "the", "to", "up", "yet", "with",
        "from", "into", "through", "during", "before", "after", "above", "below",
        "between", "among", "within", "without", "against", "toward", "towards",
        "upon", "over", "under", "beneath", "behind", "beside", "beyond",
    ],
)

VEHICLE_TEXT_FIELDS = (
    "title", "description", "location", "color", "fuel", "transmission", "engine",
    "make", "model", "stock_no", "chassis_no", "engine_code", "model_code",
    "steering", "version_class", "dimension", "weight", "capacity", "max_capacity",
)
PART_TEXT_FIELDS = (
    "name", "description", "make", "model", "brand", "model_code", "comments",
    "custom_maker",
)


def _title(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


class TextFormatter:
    def __init__(self, rules: TextFormattingRules = DEFAULT_RULES) -> None:
        self._rules = rules

    def format_text(self, text: str) -> str:
        if not text or not text.strip():
            return text
        words = _WHITESPACE.split(text.strip())
        return " ".join(self._format_word(word, index) for index, word in enumerate(words))

    def _format_word(self, word: str, index: int) -> str:
        key = word.lower()
        if key in self._rules.abbreviations:
            return self._rules.abbreviations[key]
        if key in self._rules.brand_names:
            return self._rules.brand_names[key]
        if _HAS_DIGIT.search(word):
            return _title(word)
        if index > 0 and key in self._rules.minor_words:
            return key
        return _title(word)

    def format_fields(
        self,
        data: dict[str, Any],
        fields: Iterable[str],
        list_fields: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Return a copy of ``data`` with the named string / list-of-string fields formatted."""
        formatted = dict(data)
        for name in fields:
            value = formatted.get(name)
            if isinstance(value, str) and value:
                formatted[name] = self.format_text(value)
        for name in list_fields:
            value = formatted.get(name)
            if isinstance(value, list):
                formatted[name] = [self.format_text(v) if isinstance(v, str) else v for v in value]
        return formatted
