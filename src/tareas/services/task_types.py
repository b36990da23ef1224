from enum import Enum

from tareas.services.detection import DetectionResult
from tareas.services.lexicon import ACTION_VERBS, TASK_TYPE_LABELS, TASK_TYPE_PATTERNS

PATTERN_CONFIDENCE = 0.8
ACTION_VERB_CONFIDENCE = 0.5
DEFAULT_CONFIDENCE = 0.3


class TaskType(str, Enum):
    EMAIL = "email"
    INTRO = "intro"
    DOC = "doc"
    RESEARCH = "research"
    CALL = "call"
    MEETING = "meeting"
    REVIEW = "review"
    OTHER = "other"

    @property
    def label(self) -> str:
        return TASK_TYPE_LABELS[self.value]


def detect_task_type(text: str) -> DetectionResult[TaskType]:
    """Detect the kind of task from trigger patterns.

    Falls back to OTHER, with a higher confidence when a generic action verb
    is present. OTHER is always a valid answer, so confidence is never zero.
    """
    for task_type, patterns in TASK_TYPE_PATTERNS:
        for pattern in patterns:
            if pattern.search(text):
                return DetectionResult(TaskType(task_type), PATTERN_CONFIDENCE)

    lower_text = text.lower()
    if any(verb in lower_text for verb in ACTION_VERBS):
        return DetectionResult(TaskType.OTHER, ACTION_VERB_CONFIDENCE)

    return DetectionResult(TaskType.OTHER, DEFAULT_CONFIDENCE)
