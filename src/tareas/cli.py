import argparse
import asyncio
import logging
import sys

from tareas.config import settings
from tareas.sentry import flush as sentry_flush
from tareas.sentry import init_sentry
from tareas.services.classification import ClassificationConfig
from tareas.store.local import LocalStore


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def classification_config() -> ClassificationConfig:
    return ClassificationConfig(api_key=settings.anthropic_api_key)


def get_store() -> LocalStore:
    return LocalStore(settings.store_path)


async def is_online(force_offline: bool = False) -> bool:
    from tareas.services.connectivity import HttpConnectivityProbe

    if force_offline:
        return False

    probe = HttpConnectivityProbe(
        settings.connectivity_check_url, timeout=settings.connectivity_timeout
    )
    try:
        return await probe.is_online()
    finally:
        await probe.close()


async def parse_text(text: str) -> None:
    from tareas.services.parser import Parser

    result = Parser().parse(text)

    print(f"Text: {result.text}")
    if result.group_name:
        print(f"Group: {result.group_name}")
    if result.priority:
        print(f"Priority: {result.priority.value}")
    path = " / ".join(result.category_path) or "-"
    print(f"Path: {path} ({result.path_confidence:.2f})")
    print(f"Type: {result.task_type.label} ({result.task_type_confidence:.2f})")
    print(f"Entities: {', '.join(result.entities) or '-'}")
    print(f"Due: {result.due_date.isoformat() if result.due_date else '-'}")
    print(f"Confidence: {result.overall_confidence:.2f}")

    if result.suggestions:
        print("\nSuggestions:")
        for suggestion in result.suggestions:
            print(f"  [{suggestion.kind.value}] {suggestion.label} ({suggestion.confidence:.2f})")


async def add_task(text: str, force_offline: bool = False) -> None:
    from tareas.services.classification import NoCategoriesError
    from tareas.services.classifier import build_classifier
    from tareas.services.intake import EmptyTaskError, TaskIntakeService
    from tareas.services.offline_queue import get_offline_queue

    store = get_store()
    classifier = build_classifier(settings)
    service = TaskIntakeService(store, store, get_offline_queue(), classifier)

    try:
        online = await is_online(force_offline)
        result = await service.submit(text, classification_config(), online)
    except (NoCategoriesError, EmptyTaskError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        await classifier.close()

    categories = {c.id: c.name for c in await store.list_categories()}
    print(f"Added: {result.task.text}")
    print(f"  Category: {categories[result.task.category_id]} ({result.outcome.source.value})")
    if result.task.task_group_id:
        print(f"  Group: {result.parse.group_name}")
    if result.task.priority:
        print(f"  Priority: {result.task.priority.value}")
    if result.task.due_date:
        print(f"  Due: {result.task.due_date.isoformat()}")
    if result.pending:
        print("  Offline: will be classified when the connection is back")


async def sync_queue() -> None:
    """Classify tasks that were created offline."""
    from tareas.services.classifier import build_classifier
    from tareas.services.offline_queue import get_offline_queue

    if not settings.has_anthropic:
        print("Error: TAREAS_ANTHROPIC_API_KEY not configured")
        sys.exit(1)

    queue = get_offline_queue()
    pending_count = queue.get_pending_count()

    if pending_count == 0:
        print("No pending classifications")
        return

    print(f"Classifying {pending_count} queued tasks...")

    store = get_store()
    classifier = build_classifier(settings)
    try:
        result = await queue.drain(
            classifier, store, store, classification_config(), await is_online()
        )
    finally:
        await classifier.close()

    if result.skipped_reason:
        print(f"Skipped: {result.skipped_reason}")
        return

    print("\nSync results:")
    print(f"  Processed: {result.successful}")
    print(f"  Moved: {result.reclassified}")
    print(f"  No better category: {result.unmatched}")
    print(f"  Already in place: {result.unchanged}")

    if result.errors:
        print("\nErrors:")
        for error in result.errors:
            print(f"  - {error}")

    if result.all_successful:
        print("\nAll queued tasks classified!")
    elif result.remaining > 0:
        print(f"\n{result.remaining} tasks remain in queue for retry")


async def watch_connectivity() -> None:
    """Drain the queue on startup and every time the network comes back."""
    from tareas.services.classifier import build_classifier
    from tareas.services.connectivity import ConnectivityWatcher, HttpConnectivityProbe
    from tareas.services.offline_queue import get_offline_queue

    logger = logging.getLogger("tareas.watch")
    store = get_store()
    queue = get_offline_queue()
    classifier = build_classifier(settings)
    probe = HttpConnectivityProbe(
        settings.connectivity_check_url, timeout=settings.connectivity_timeout
    )

    async def drain() -> None:
        result = await queue.drain(classifier, store, store, classification_config(), True)
        if result.total_pending:
            logger.info(
                f"Drained {result.successful}/{result.total_pending} pending classifications"
            )

    watcher = ConnectivityWatcher(probe, drain, interval=settings.connectivity_poll_seconds)
    await watcher.start()
    try:
        await asyncio.Event().wait()
    finally:
        await watcher.stop()
        await probe.close()
        await classifier.close()


async def show_tree() -> None:
    from tareas.services.grouping import PathGroup, group_tasks_by_path

    tasks = [t for t in await get_store().list_tasks() if not t.is_archived]
    groups = group_tasks_by_path(tasks)
    if not groups:
        print("No tasks")
        return

    def print_group(group: PathGroup, depth: int) -> None:
        indent = "  " * depth
        print(f"{indent}{group.node.name} ({group.node.task_count})")
        for task in group.tasks:
            mark = "x" if task.is_completed else " "
            print(f"{indent}  [{mark}] {task.text}")
        for sub_group in group.sub_groups:
            print_group(sub_group, depth + 1)

    for group in groups:
        print_group(group, 0)


async def list_categories() -> None:
    categories = await get_store().list_categories()
    if not categories:
        print("No categories. Create one with: tareas category-add NAME")
        return

    for category in categories:
        keywords = f" [{', '.join(category.keywords)}]" if category.keywords else ""
        print(f"{category.order}. {category.name}{keywords}")


async def add_category(name: str, context_hint: str, keywords: str) -> None:
    category = await get_store().add_category(
        name,
        context_hint=context_hint,
        keywords=[k.strip() for k in keywords.split(",") if k.strip()],
    )
    print(f"Created category {category.name}")


async def check_config() -> None:
    print("Tareas Configuration Check\n")

    checks = [
        ("Anthropic API Key", settings.has_anthropic),
        ("Classifier endpoint", settings.has_classifier_endpoint),
        ("Sentry DSN", settings.has_sentry),
    ]
    for name, configured in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")

    print(f"\n  Data directory: {settings.data_path}")
    print(f"  Timezone: {settings.user_timezone}")
    print(f"  Online: {'yes' if await is_online() else 'no'}")

    print()
    if settings.has_anthropic:
        print("AI classification enabled.")
    else:
        print("AI classification disabled; new tasks go to the first category.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Tareas task capture")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_cmd = subparsers.add_parser("parse", help="Show what the parser detects")
    parse_cmd.add_argument("text", nargs="+")

    add_cmd = subparsers.add_parser("add", help="Add a task")
    add_cmd.add_argument("text", nargs="+")
    add_cmd.add_argument("--offline", action="store_true", help="Skip the classifier and queue")

    subparsers.add_parser("sync", help="Classify tasks created offline")
    subparsers.add_parser("watch", help="Classify queued tasks whenever the network returns")
    subparsers.add_parser("tree", help="Show tasks grouped by detected path")
    subparsers.add_parser("categories", help="List categories")

    category_cmd = subparsers.add_parser("category-add", help="Create a category")
    category_cmd.add_argument("name")
    category_cmd.add_argument("--context", default="", help="Hint for the classifier")
    category_cmd.add_argument("--keywords", default="", help="Comma-separated keywords")

    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args()

    setup_logging()

    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        if args.command == "parse":
            asyncio.run(parse_text(" ".join(args.text)))
        elif args.command == "add":
            asyncio.run(add_task(" ".join(args.text), force_offline=args.offline))
        elif args.command == "sync":
            asyncio.run(sync_queue())
        elif args.command == "watch":
            asyncio.run(watch_connectivity())
        elif args.command == "tree":
            asyncio.run(show_tree())
        elif args.command == "categories":
            asyncio.run(list_categories())
        elif args.command == "category-add":
            asyncio.run(add_category(args.name, args.context, args.keywords))
        elif args.command == "check":
            asyncio.run(check_config())
        else:
            parser.print_help()
    finally:
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    main()
