"""Language Check - verifies interviewer output is in the session's locale.

Invariants:
    - Only validates oracle output, never student input
    - Short text (<30 chars) and low-confidence detection (<0.7) never count as a mismatch
    - Deterministic: DetectorFactory.seed is set before any detect call

Design Decisions:
    - langdetect: pure Python, no binary wheels
    - A mismatch triggers one oracle retry in services/interviewer.py, then the
      fixed Hebrew fallback; this module only answers yes/no
"""

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

DetectorFactory.seed = 0

MIN_TEXT_LENGTH = 30
MIN_CONFIDENCE = 0.7


def detect_language(text: str) -> tuple[str | None, float]:
    """Most probable language code and its probability; (None, 0.0) if undecidable."""
    if not text or len(text.strip()) < MIN_TEXT_LENGTH:
        return None, 0.0
    try:
        results = detect_langs(text)
    except LangDetectException:
        return None, 0.0
    if not results:
        return None, 0.0
    top = results[0]
    return top.lang, round(top.prob, 4)


def is_language_mismatch(text: str, expected: str) -> bool:
    """True only when text is confidently detected as another language."""
    detected, confidence = detect_language(text)
    if detected is None or confidence < MIN_CONFIDENCE:
        return False
    return detected != expected
