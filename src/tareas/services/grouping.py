"""Group tasks by their detected category path for display."""

from dataclasses import dataclass, field

from tareas.store.schemas import Task

UNASSIGNED_LABEL = "Sin asignar"


@dataclass
class PathNode:
    name: str
    path: list[str]
    task_count: int = 0  # tasks whose path is exactly this one
    children: list["PathNode"] = field(default_factory=list)

    @property
    def path_id(self) -> str:
        return "/".join(self.path)


@dataclass
class PathGroup:
    node: PathNode
    tasks: list[Task] = field(default_factory=list)
    sub_groups: list["PathGroup"] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tasks and not self.sub_groups


def _sort_nodes(nodes: list[PathNode]) -> None:
    nodes.sort(key=lambda n: n.name.casefold())
    for node in nodes:
        _sort_nodes(node.children)


def build_path_tree(tasks: list[Task]) -> list[PathNode]:
    """Build one node per distinct path prefix, children sorted by name."""
    nodes: dict[tuple[str, ...], PathNode] = {}

    for task in tasks:
        for depth in range(1, len(task.category_path) + 1):
            prefix = tuple(task.category_path[:depth])
            if prefix not in nodes:
                node = PathNode(name=prefix[-1], path=list(prefix))
                nodes[prefix] = node
                if depth > 1:
                    nodes[prefix[:-1]].children.append(node)

        if task.category_path:
            nodes[tuple(task.category_path)].task_count += 1

    roots = [node for key, node in nodes.items() if len(key) == 1]
    _sort_nodes(roots)
    return roots


def _build_group(node: PathNode, tasks: list[Task]) -> PathGroup:
    direct = [t for t in tasks if t.category_path == node.path]
    sub_groups = [_build_group(child, tasks) for child in node.children]
    return PathGroup(
        node=node,
        tasks=direct,
        sub_groups=[g for g in sub_groups if not g.is_empty],
    )


def group_tasks_by_path(tasks: list[Task]) -> list[PathGroup]:
    """Nest tasks under their path, unassigned tasks first.

    Tasks without a path go to a leading "Sin asignar" group, present only
    when there are such tasks. Groups with no tasks anywhere below are
    dropped.
    """
    groups: list[PathGroup] = []

    unassigned = [t for t in tasks if not t.category_path]
    if unassigned:
        groups.append(
            PathGroup(
                node=PathNode(name=UNASSIGNED_LABEL, path=[], task_count=len(unassigned)),
                tasks=unassigned,
            )
        )

    for root in build_path_tree(tasks):
        group = _build_group(root, tasks)
        if not group.is_empty:
            groups.append(group)

    return groups


def find_node(tree: list[PathNode], path: list[str]) -> PathNode | None:
    for node in tree:
        if node.path == path:
            return node
        found = find_node(node.children, path)
        if found:
            return found
    return None


def all_paths(tree: list[PathNode]) -> list[list[str]]:
    """Every node's path, depth-first in display order."""
    paths: list[list[str]] = []
    for node in tree:
        paths.append(node.path)
        paths.extend(all_paths(node.children))
    return paths
