from __future__ import annotations

from app.common.errors import MissingPlaceholder, UnsupportedLanguage
from app.features.judge0.languages import Language

STUDENT_CODE_PLACEHOLDER = "// STUDENT_CODE_PLACEHOLDER"


def require_placeholder(harness: str, language: Language) -> None:
    if language.uses_placeholder and STUDENT_CODE_PLACEHOLDER not in (harness or ""):
        raise MissingPlaceholder(
            f"Validation program must include {STUDENT_CODE_PLACEHOLDER} for Java or C++"
        )


def combine_code_with_harness(student_code: str, harness: str, language: Language) -> str:
    """Merge the student's code with the instructor's validation program.

    Java and C++ harnesses wrap the student code, which replaces the placeholder
    marker. Python and JavaScript harnesses call into the student's definitions, so
    they are appended below the code.
    """
    if language.uses_placeholder:
        require_placeholder(harness, language)
        return harness.replace(STUDENT_CODE_PLACEHOLDER, student_code, 1)
    if language in (Language.python, Language.javascript):
        return f"{student_code}\n\n{harness or ''}"
    raise UnsupportedLanguage(f"Unsupported language: {language.value}")


__all__ = ["STUDENT_CODE_PLACEHOLDER", "combine_code_with_harness", "require_placeholder"]
