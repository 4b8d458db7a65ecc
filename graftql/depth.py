"""Query depth limiting.

Depth counts nested fields: ``{ a { b } }`` has depth 2. Inline fragments and
fragment spreads are transparent and introspection fields are ignored.
"""
from __future__ import annotations

from typing import Any, FrozenSet, Optional, Type

from graphql import (
    FieldNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
    ValidationRule,
)
from strawberry.extensions import AddValidationRules

from .exceptions import DepthExceededError

__all__ = ['selection_depth', 'depth_limit_rule', 'depth_limit_extension']


def selection_depth(
    selection_set: Optional[SelectionSetNode],
    context: Any,
    seen_fragments: FrozenSet[str] = frozenset(),
) -> int:
    if selection_set is None:
        return 0
    deepest = 0
    for sel in selection_set.selections:
        if isinstance(sel, FieldNode):
            if sel.name.value.startswith('__'):
                continue
            depth = 1 + selection_depth(sel.selection_set, context, seen_fragments)
        elif isinstance(sel, InlineFragmentNode):
            depth = selection_depth(sel.selection_set, context, seen_fragments)
        elif isinstance(sel, FragmentSpreadNode):
            name = sel.name.value
            fragment = context.get_fragment(name) if name not in seen_fragments else None
            if fragment is None:
                continue
            depth = selection_depth(fragment.selection_set, context, seen_fragments | {name})
        else:
            continue
        deepest = max(deepest, depth)
    return deepest


def depth_limit_rule(max_depth: int) -> Type[ValidationRule]:
    """Build a validation rule rejecting operations deeper than ``max_depth``."""

    class DepthLimitRule(ValidationRule):
        def enter_operation_definition(self, node: OperationDefinitionNode, *_args: Any) -> None:
            depth = selection_depth(node.selection_set, self.context)
            if depth > max_depth:
                self.report_error(DepthExceededError(depth, max_depth))

    DepthLimitRule.__name__ = f"DepthLimitRule{max_depth}"
    return DepthLimitRule


def depth_limit_extension(max_depth: int) -> Type[AddValidationRules]:
    """Schema extension class enforcing ``max_depth``.

    Strawberry builds a fresh instance of it for every request.
    """
    rule = depth_limit_rule(max_depth)

    class DepthLimitExtension(AddValidationRules):
        def __init__(self, *, execution_context: Any = None) -> None:
            super().__init__([rule])
            if execution_context is not None:
                self.execution_context = execution_context

    DepthLimitExtension.__name__ = f"DepthLimitExtension{max_depth}"
    return DepthLimitExtension
