"""Entity extraction for task text.

Finds people and companies mentioned in a task using a list of known first
names, capitalization heuristics and the "A <> B" introduction shorthand.
"""

import re

from tareas.services.detection import DetectionResult
from tareas.services.lexicon import ENTITY_SKIP_WORDS, KNOWN_NAMES

ENTITY_CONFIDENCE = 0.7

INTRO_DELIMITER = "<>"

_PUNCTUATION = re.compile(r"[.,;:!?()]")
_CAPITALIZED = re.compile(r"^[A-ZÁÉÍÓÚÑ][a-záéíóúñ]+$")
_UPPERCASE = re.compile(r"^[A-Z]{2,}$")
_STARTS_UPPER = re.compile(r"^[A-ZÁÉÍÓÚÑ]")


class EntityExtractor:
    """Extracts entity names from free text.

    Strategies, merged in order and deduplicated:
    1. Tokens that are known first names (kept with the user's casing)
    2. Capitalized words after the first token
    3. All-caps tokens such as company acronyms
    4. The trailing capitalized word on each side of "A <> B"
    """

    def __init__(
        self,
        known_names: frozenset[str] = KNOWN_NAMES,
        skip_words: frozenset[str] = ENTITY_SKIP_WORDS,
    ):
        self.known_names = known_names
        self.skip_words = skip_words

    def extract(self, text: str) -> list[str]:
        entities: list[str] = []

        for index, word in enumerate(text.split()):
            clean_word = _PUNCTUATION.sub("", word)
            if len(clean_word) < 2:
                continue

            if clean_word.lower() in self.known_names:
                entities.append(clean_word)
                continue

            if index > 0 and _CAPITALIZED.match(clean_word):
                if clean_word.lower() not in self.skip_words:
                    entities.append(clean_word)

            if _UPPERCASE.match(clean_word) and clean_word.lower() not in self.skip_words:
                entities.append(clean_word)

        if INTRO_DELIMITER in text:
            for candidate in self._intro_parties(text):
                if candidate not in entities:
                    entities.append(candidate)

        return list(dict.fromkeys(entities))

    def _intro_parties(self, text: str) -> list[str]:
        parties = []
        for part in text.split(INTRO_DELIMITER):
            tokens = part.strip().split()
            if not tokens:
                continue
            last_word = tokens[-1]
            if not _STARTS_UPPER.match(last_word):
                continue
            clean_word = _PUNCTUATION.sub("", last_word)
            if clean_word and clean_word.lower() not in self.skip_words:
                parties.append(clean_word)
        return parties


_default_extractor = EntityExtractor()


def detect_entities(text: str) -> DetectionResult[list[str]]:
    entities = _default_extractor.extract(text)
    return DetectionResult(entities, ENTITY_CONFIDENCE if entities else 0.0)
