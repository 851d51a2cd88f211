import re
from enum import Enum
from typing import Any, Type


class ThreatLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class EnumNormalizer:
    # alias -> canonical, one table per enum
    ALIASES: dict[Type[Enum], dict[str, str]] = {
        ThreatLevel: {
            "low": "Low",
            "minor": "Low",
            "mild": "Low",
            "medium": "Medium",
            "moderate": "Medium",
            "mid": "Medium",
            "high": "High",
            "severe": "High",
            "critical": "High",
            "very high": "High",
        },
    }

    @staticmethod
    def _canon_key(x: Any) -> str:
        s = str(x).strip().lower()
        s = re.sub(r"\s+", " ", s)
        return s

    @classmethod
    def normalize(cls, enum_cls: Type[Enum], value: Any) -> Any:
        if value is None:
            return value

        if isinstance(value, enum_cls):
            return value.value

        key = cls._canon_key(value)
        aliases = cls.ALIASES.get(enum_cls, {})
        # unknown values pass through untouched so the model's wording still shows
        return aliases.get(key, value)
