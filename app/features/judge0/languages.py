"""Language registry: human readable language names to Judge0 language ids."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Union

from app.common.errors import UnsupportedLanguage


class Language(str, Enum):
    python = "python"
    javascript = "javascript"
    java = "java"
    cpp = "cpp"
    c = "c"

    @property
    def judge0_id(self) -> int:
        return _JUDGE0_IDS[self]

    @property
    def harness_key(self) -> Optional[str]:
        """Key of this language inside a question's ``validationProgram`` mapping."""
        return _HARNESS_KEYS.get(self)

    @property
    def uses_placeholder(self) -> bool:
        return self in (Language.java, Language.cpp)

    @classmethod
    def from_id(cls, language_id: Union[int, str]) -> "Language":
        try:
            lid = int(language_id)
        except (TypeError, ValueError):
            raise UnsupportedLanguage(f"Unsupported language: {language_id!r}") from None
        for lang, known in _JUDGE0_IDS.items():
            if known == lid:
                return lang
        raise UnsupportedLanguage(f"Unsupported language: {language_id!r}")

    @classmethod
    def from_name(cls, name: str) -> "Language":
        key = (name or "").strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedLanguage(f"Unsupported language: {name!r}") from None


_JUDGE0_IDS: Dict[Language, int] = {
    Language.python: 71,
    Language.javascript: 63,
    Language.java: 62,
    Language.cpp: 54,
    Language.c: 50,
}

_HARNESS_KEYS: Dict[Language, str] = {
    Language.python: "python",
    Language.javascript: "javascript",
    Language.java: "java",
    Language.cpp: "cpp",
}

_ALIASES = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "node": "javascript",
    "c++": "cpp",
}

_DISPLAY_NAMES = {
    Language.python: "Python (3.8.1)",
    Language.javascript: "JavaScript (Node.js 12.14.0)",
    Language.java: "Java (OpenJDK 13.0.1)",
    Language.cpp: "C++ (GCC 9.2.0)",
    Language.c: "C (GCC 9.2.0)",
}


def language_id(name: Union[str, Language]) -> int:
    lang = name if isinstance(name, Language) else Language.from_name(name)
    return lang.judge0_id


def supported_languages() -> List[Dict[str, object]]:
    return [
        {"id": lang.judge0_id, "name": _DISPLAY_NAMES[lang], "key": lang.value}
        for lang in Language
    ]


__all__ = ["Language", "language_id", "supported_languages"]
