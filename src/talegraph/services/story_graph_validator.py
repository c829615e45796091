"""Static story graph validation utilities."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, List, MutableMapping, Tuple

from talegraph.core.types import Severity
from talegraph.domain.defs import (
    TERMINAL_TARGETS,
    AllOf,
    AnyOf,
    ChoiceNode,
    Condition,
    DeathNode,
    Effect,
    InputNode,
    LogicNode,
    Not,
    SetValue,
    StoryGraph,
    StoryNode,
    UnknownCondition,
    UnknownEffect,
    iter_edges,
    set_value_problem,
)


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]

    @property
    def node_id(self) -> str | None:
        return self.context.get("node_id")


@dataclass(slots=True)
class ValidationReport:
    """Findings split by severity, each list in discovery order."""

    errors: List[Issue] = field(default_factory=list)
    warnings: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, issue: Issue) -> None:
        if issue.severity == "ERROR":
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def all(self) -> List[Issue]:
        return [*self.errors, *self.warnings]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate(graph: StoryGraph) -> ValidationReport:
    """Run every check over ``graph`` and report all findings together."""
    report = ValidationReport()
    if graph.start_node_id not in graph.nodes:
        report.add(
            Issue(
                severity="ERROR",
                code="MISSING_START_NODE",
                message="Start node does not exist; the story cannot be played.",
                context={"node_id": graph.start_node_id},
            )
        )
    for node_id, node in graph.nodes.items():
        _validate_node_references(node_id, node, graph, report)
        _validate_dead_end(node_id, node, report)
        _validate_logic_branches(node_id, node, report)
        _validate_malformed_content(node_id, node, report)
    _validate_reachability(graph, report)
    _validate_logic_cycles(graph, report)
    return report


def _validate_node_references(
    node_id: str, node: StoryNode, graph: StoryGraph, report: ValidationReport
) -> None:
    for field_path, target in iter_edges(node):
        if target in graph.nodes:
            continue
        if target in TERMINAL_TARGETS and not isinstance(node, LogicNode):
            continue
        report.add(
            Issue(
                severity="ERROR",
                code="MISSING_NODE_REF",
                message="Node references missing node.",
                context={"node_id": node_id, "field_path": field_path, "referenced_id": target},
            )
        )


def _validate_dead_end(node_id: str, node: StoryNode, report: ValidationReport) -> None:
    if isinstance(node, DeathNode):
        return
    if isinstance(node, LogicNode):
        has_output = bool(node.next_true or node.next_false)
        message = f"Logic node '{node_id}' has no connections."
    else:
        choices = node.choices if isinstance(node, ChoiceNode) else ()
        has_output = bool(choices) or bool(getattr(node, "next_node_id", None))
        message = f"Node '{node_id}' is a dead end (no choices/next)."
    if has_output:
        return
    report.add(
        Issue(
            severity="ERROR",
            code="DEAD_END",
            message=message,
            context={"node_id": node_id, "node_type": node.kind},
        )
    )


def _validate_logic_branches(node_id: str, node: StoryNode, report: ValidationReport) -> None:
    if not isinstance(node, LogicNode):
        return
    if bool(node.next_true) == bool(node.next_false):
        return
    missing = "nextFalse" if node.next_true else "nextTrue"
    report.add(
        Issue(
            severity="WARN",
            code="DANGLING_LOGIC_BRANCH",
            message=f"Logic node has no {missing} target; play stops if that branch is taken.",
            context={"node_id": node_id, "field_path": missing},
        )
    )


def _validate_malformed_content(node_id: str, node: StoryNode, report: ValidationReport) -> None:
    for path, condition in _iter_node_conditions(node):
        for sub_path, problem in _find_condition_problems(condition, path):
            report.add(
                Issue(
                    severity="WARN",
                    code="MALFORMED_CONDITION",
                    message=problem,
                    context={"node_id": node_id, "field_path": sub_path},
                )
            )
    for path, effect in _iter_node_effects(node):
        problem = _effect_problem(effect)
        if problem is None:
            continue
        report.add(
            Issue(
                severity="WARN",
                code="MALFORMED_EFFECT",
                message=problem,
                context={"node_id": node_id, "field_path": path},
            )
        )


def _iter_node_conditions(node: StoryNode) -> Iterator[Tuple[str, Condition]]:
    if isinstance(node, LogicNode):
        if node.condition is not None:
            yield "condition", node.condition
        return
    if isinstance(node, (ChoiceNode, InputNode)):
        if isinstance(node.text, tuple):
            for index, variant in enumerate(node.text):
                if variant.condition is not None:
                    yield f"text[{index}].condition", variant.condition
    if isinstance(node, ChoiceNode):
        for index, choice in enumerate(node.choices):
            if choice.condition is not None:
                yield f"choices[{index}].condition", choice.condition


def _iter_node_effects(node: StoryNode) -> Iterator[Tuple[str, Effect]]:
    if isinstance(node, (ChoiceNode, InputNode)):
        for index, effect in enumerate(node.effects):
            yield f"effects[{index}]", effect
    if isinstance(node, ChoiceNode):
        for choice_index, choice in enumerate(node.choices):
            for effect_index, effect in enumerate(choice.effects):
                yield f"choices[{choice_index}].effects[{effect_index}]", effect


def _find_condition_problems(condition: Condition, path: str) -> Iterator[Tuple[str, str]]:
    if isinstance(condition, UnknownCondition):
        yield path, f"Condition type '{condition.type}' is not recognized and evaluates as true."
    elif isinstance(condition, Not):
        if condition.condition is None:
            yield path, "NOT condition has no child condition and evaluates as true."
        else:
            yield from _find_condition_problems(condition.condition, f"{path}.condition")
    elif isinstance(condition, (AllOf, AnyOf)):
        for index, child in enumerate(condition.conditions):
            yield from _find_condition_problems(child, f"{path}.conditions[{index}]")


def _effect_problem(effect: Effect) -> str | None:
    if isinstance(effect, UnknownEffect):
        return f"Effect type '{effect.type}' is not recognized by runtime and will be ignored."
    if isinstance(effect, SetValue):
        return set_value_problem(effect)
    return None


def _validate_reachability(graph: StoryGraph, report: ValidationReport) -> None:
    reachable: set[str] = set()
    queue: deque[str] = deque()
    if graph.start_node_id in graph.nodes:
        reachable.add(graph.start_node_id)
        queue.append(graph.start_node_id)
    while queue:
        node = graph.nodes[queue.popleft()]
        for _, next_id in iter_edges(node):
            if next_id in graph.nodes and next_id not in reachable:
                reachable.add(next_id)
                queue.append(next_id)
    for node_id in sorted(set(graph.nodes) - reachable):
        report.add(
            Issue(
                severity="WARN",
                code="UNREACHABLE_NODE",
                message=f"Node '{node_id}' is unreachable from start.",
                context={"node_id": node_id},
            )
        )


def _validate_logic_cycles(graph: StoryGraph, report: ValidationReport) -> None:
    adjacency: MutableMapping[str, list[str]] = {}
    for node_id, node in graph.nodes.items():
        if not isinstance(node, LogicNode):
            continue
        targets = (node.next_true, node.next_false)
        adjacency[node_id] = [
            target
            for target in dict.fromkeys(targets)
            if target and isinstance(graph.nodes.get(target), LogicNode)
        ]

    visited: set[str] = set()
    stack: list[str] = []
    stack_set: set[str] = set()
    cycles: list[list[str]] = []

    def dfs(current: str) -> None:
        visited.add(current)
        stack.append(current)
        stack_set.add(current)
        for next_node in adjacency.get(current, []):
            if next_node not in visited:
                dfs(next_node)
            elif next_node in stack_set:
                cycles.append(stack[stack.index(next_node) :])
        stack.pop()
        stack_set.remove(current)

    for node_id in sorted(adjacency):
        if node_id not in visited:
            dfs(node_id)

    for cycle in cycles:
        cycle_path = " -> ".join(cycle + [cycle[0]])
        report.add(
            Issue(
                severity="ERROR",
                code="LOGIC_CYCLE",
                message="Logic nodes form a cycle; resolution would never reach a scene.",
                context={"node_id": cycle[0], "cycle": cycle_path},
            )
        )
