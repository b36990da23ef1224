"""tareas services module.

Parsing, classification and queueing for task intake. Imports are lazy so
the rule-based parser can be used without pulling in the HTTP stack.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Parser
    "Parser": ("tareas.services.parser", "Parser"),
    "ParseResult": ("tareas.services.parser", "ParseResult"),
    "parse_shorthand": ("tareas.services.parser", "parse_shorthand"),
    "parse_task_input": ("tareas.services.parser", "parse_task_input"),
    # Detectors
    "build_category_path": ("tareas.services.blocks", "build_category_path"),
    "detect_category": ("tareas.services.blocks", "detect_category"),
    "detect_subcategories": ("tareas.services.blocks", "detect_subcategories"),
    "TaskType": ("tareas.services.task_types", "TaskType"),
    "detect_task_type": ("tareas.services.task_types", "detect_task_type"),
    "EntityExtractor": ("tareas.services.entities", "EntityExtractor"),
    "detect_entities": ("tareas.services.entities", "detect_entities"),
    "detect_due_date": ("tareas.services.dates", "detect_due_date"),
    # Suggestions
    "Suggestion": ("tareas.services.suggestions", "Suggestion"),
    "SuggestionKind": ("tareas.services.suggestions", "SuggestionKind"),
    "SuggestionTray": ("tareas.services.suggestions", "SuggestionTray"),
    "CaptureSession": ("tareas.services.capture", "CaptureSession"),
    # Classification
    "AnthropicClassifier": ("tareas.services.classifier", "AnthropicClassifier"),
    "ProxyClassifier": ("tareas.services.classifier", "ProxyClassifier"),
    "ClassifierUnavailable": ("tareas.services.classifier", "ClassifierUnavailable"),
    "build_classifier": ("tareas.services.classifier", "build_classifier"),
    "resolve_category_name": ("tareas.services.classifier", "resolve_category_name"),
    "ClassificationConfig": ("tareas.services.classification", "ClassificationConfig"),
    "ClassificationOutcome": ("tareas.services.classification", "ClassificationOutcome"),
    "ClassificationPolicy": ("tareas.services.classification", "ClassificationPolicy"),
    "NoCategoriesError": ("tareas.services.classification", "NoCategoriesError"),
    # Offline queue
    "OfflineQueue": ("tareas.services.offline_queue", "OfflineQueue"),
    "QueueProcessResult": ("tareas.services.offline_queue", "QueueProcessResult"),
    "get_offline_queue": ("tareas.services.offline_queue", "get_offline_queue"),
    # Connectivity
    "ConnectivityWatcher": ("tareas.services.connectivity", "ConnectivityWatcher"),
    "HttpConnectivityProbe": ("tareas.services.connectivity", "HttpConnectivityProbe"),
    "StaticConnectivity": ("tareas.services.connectivity", "StaticConnectivity"),
    # Grouping
    "build_path_tree": ("tareas.services.grouping", "build_path_tree"),
    "group_tasks_by_path": ("tareas.services.grouping", "group_tasks_by_path"),
    # Intake
    "TaskIntakeService": ("tareas.services.intake", "TaskIntakeService"),
    "EmptyTaskError": ("tareas.services.intake", "EmptyTaskError"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
