"""Category and sub-category detection.

The two detectors deliberately differ: the category detector stops at the
first table entry that matches, while the sub-category detector collects
every matching entry. The path builder combines both into a root-first path.
"""

import re

from tareas.services.detection import DetectionResult
from tareas.services.lexicon import CATEGORY_KEYWORDS, SUBCATEGORY_KEYWORDS

MAX_SUBCATEGORIES = 2

CATEGORY_WORD_CONFIDENCE = 0.9
CATEGORY_SUBSTRING_CONFIDENCE = 0.7
SUBCATEGORY_WORD_CONFIDENCE = 0.85
SUBCATEGORY_SUBSTRING_CONFIDENCE = 0.65


def _is_word_match(keyword: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", text, re.IGNORECASE) is not None


def detect_category(
    text: str,
    table: dict[str, list[str]] = CATEGORY_KEYWORDS,
) -> DetectionResult[str | None]:
    """Return the first category in table order whose trigger phrase occurs in text."""
    lower_text = text.lower()

    for category, keywords in table.items():
        for keyword in keywords:
            if keyword in lower_text:
                confidence = (
                    CATEGORY_WORD_CONFIDENCE
                    if _is_word_match(keyword, lower_text)
                    else CATEGORY_SUBSTRING_CONFIDENCE
                )
                return DetectionResult(category, confidence)

    return DetectionResult(None, 0.0)


def detect_subcategories(
    text: str,
    table: dict[str, list[str]] = SUBCATEGORY_KEYWORDS,
) -> list[DetectionResult[str]]:
    """Return every sub-category that matches, at most once per canonical name."""
    lower_text = text.lower()
    results: list[DetectionResult[str]] = []

    for subcategory, keywords in table.items():
        for keyword in keywords:
            if keyword in lower_text:
                confidence = (
                    SUBCATEGORY_WORD_CONFIDENCE
                    if _is_word_match(keyword, lower_text)
                    else SUBCATEGORY_SUBSTRING_CONFIDENCE
                )
                results.append(DetectionResult(subcategory, confidence))
                break

    return results


def build_category_path(text: str) -> DetectionResult[list[str]]:
    """Build a root-first path: the category, then the top sub-categories.

    Confidence is the mean of the contributing detections, 0 for an empty path.
    """
    category = detect_category(text)
    subcategories = detect_subcategories(text)

    path: list[str] = []
    confidences: list[float] = []

    if category.value is not None:
        path.append(category.value)
        confidences.append(category.confidence)

    ranked = sorted(subcategories, key=lambda result: result.confidence, reverse=True)
    for sub in ranked[:MAX_SUBCATEGORIES]:
        path.append(sub.value)
        confidences.append(sub.confidence)

    if not confidences:
        return DetectionResult([], 0.0)

    return DetectionResult(path, sum(confidences) / len(confidences))
