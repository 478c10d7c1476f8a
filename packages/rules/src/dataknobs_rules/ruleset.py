"""Hierarchical namespace of rule definitions with scoped chaining.

A Ruleset is a trie keyed by the dot-separated segments of rule names. Each
node holds at most one rule definition and any number of named children.
From a node you can chain rules which are its direct children, or children
of any of its ancestors (parents and siblings of parents).

For example, with a ruleset built from the following named rules...
 - number
 - number.min
 - number.integer
 - number.integer.thirtyTwoBit
 - date.min
 - date.iso
 - required

then, starting at the root of the tree:

    ```python
    jo.number().min(1)         # valid, chains on `number` and `number.min`
    jo.number().iso()          # invalid, `iso` isn't in `number`'s tree
    jo.number().required()     # valid, `required` is a child of the root
    jo.thirtyTwoBit()          # invalid, not a direct child of the root
    ```

If names conflict, the deeper (more specific) children always override the
shallower ones: after ``jo.date()``, ``min`` resolves to ``date.min``.

Typical usage example:

    ```python
    from dataknobs_rules import Ruleset

    ruleset = Ruleset().register(StringRule, MinLength, Required)
    node = ruleset.get("string").resolve("min")
    print(ruleset.as_string(multiline=True))
    ```
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Sequence, Tuple, TypeVar, Union

import graphviz

from .exceptions import RuleDefinitionError

if TYPE_CHECKING:
    from .rule import Rule

logger = logging.getLogger(__name__)

T = TypeVar("T")

RulePath = Union[str, Sequence[str]]


def split_rule_name(name: RulePath) -> List[str]:
    """Split a dotted rule name into its path segments.

    Args:
        name: Dotted name (``"string.min"``) or a sequence of segments

    Returns:
        List of non-empty segments
    """
    segments = name.split(".") if isinstance(name, str) else list(name)
    if any(not segment for segment in segments):
        raise RuleDefinitionError(
            f"Invalid rule path: {name!r}",
            context={"path": name},
        )
    return segments


class Ruleset:
    """A node in the rule namespace tree.

    Each node maintains:
    - Zero or one rule definition (``node``)
    - A mapping from name segment to child Ruleset
    - A reference to its parent node (None for the root)

    The tree is built once by registration and is read-only afterwards, so
    a single ruleset may be shared by any number of validators and runs.

    Attributes:
        segment: This node's name segment (None for the root)
        node: The rule definition held by this node, or None
        parent: Parent Ruleset, or None for the root
    """

    def __init__(self, segment: str | None = None, parent: Ruleset | None = None):
        """Initialize a ruleset node.

        Args:
            segment: Name segment of this node within its parent
            parent: Parent node, or None for a root
        """
        self._segment = segment
        self._parent = parent
        self._node: type[Rule] | None = None
        self._children: Dict[str, Ruleset] = {}

    def __repr__(self) -> str:
        return f"Ruleset({self.name or '<root>'})"

    def __contains__(self, name: str) -> bool:
        return name in self._children

    @property
    def segment(self) -> str | None:
        """This node's name segment."""
        return self._segment

    @property
    def node(self) -> type[Rule] | None:
        """The rule definition held by this node, or None."""
        return self._node

    @property
    def parent(self) -> Ruleset | None:
        """This node's parent, or None for the root."""
        return self._parent

    @property
    def children(self) -> Dict[str, Ruleset]:
        """This node's children keyed by name segment."""
        return dict(self._children)

    @property
    def root(self) -> Ruleset:
        """The root node of this tree."""
        root = self
        while root._parent is not None:
            root = root._parent
        return root

    @property
    def path(self) -> Tuple[str, ...]:
        """Name segments from the root to this node."""
        segments: List[str] = []
        node: Ruleset | None = self
        while node is not None and node._segment is not None:
            segments.append(node._segment)
            node = node._parent
        return tuple(reversed(segments))

    @property
    def name(self) -> str:
        """Dotted name of this node (empty for the root)."""
        return ".".join(self.path)

    @property
    def depth(self) -> int:
        """Number of hops from the root to this node."""
        return len(self.path)

    def add_rule(self, path: RulePath, rule: type[Rule]) -> Ruleset:
        """Insert a rule definition at the node reached by ``path``.

        Intermediate nodes are created as needed. Re-inserting the same path
        replaces the prior definition.

        Args:
            path: Dotted name or segments relative to this node
            rule: Rule class to hold at the terminal node

        Returns:
            The terminal node
        """
        node = self
        for segment in split_rule_name(path):
            child = node._children.get(segment)
            if child is None:
                child = Ruleset(segment, node)
                node._children[segment] = child
            node = child

        if node._node is not None and node._node is not rule:
            logger.debug(
                f"Replacing rule '{node.name}': {node._node.__name__} -> {rule.__name__}"
            )
        node._node = rule
        return node

    def register(self, *rules: type[Rule]) -> Ruleset:
        """Insert each rule definition at its ``rule_name``.

        Args:
            *rules: Rule classes to register

        Returns:
            Self for chaining

        Raises:
            RuleDefinitionError: If a rule class has no ``rule_name``
        """
        for rule in rules:
            name = getattr(rule, "rule_name", None)
            if not name:
                raise RuleDefinitionError(
                    f"Rule class '{getattr(rule, '__name__', rule)}' has no rule_name",
                    context={"rule": getattr(rule, "__name__", repr(rule))},
                )
            self.add_rule(name, rule)
        return self

    def get(self, path: RulePath) -> Ruleset | None:
        """Get the node at ``path`` below this node, if it exists."""
        node: Ruleset | None = self
        for segment in split_rule_name(path):
            if node is None:
                return None
            node = node._children.get(segment)
        return node

    def resolve(self, name: str) -> Ruleset | None:
        """Find the node a chain call of ``name`` reaches from this scope.

        Looks at this node's children first, then at each ancestor's children
        up to the root, so deeper definitions win.

        Args:
            name: A single name segment

        Returns:
            The reached node, or None if ``name`` is not reachable
        """
        node: Ruleset | None = self
        while node is not None:
            child = node._children.get(name)
            if child is not None:
                return child
            node = node._parent
        return None

    def reachable(self) -> Dict[str, Ruleset]:
        """All names callable from this scope, mapped to the node each reaches."""
        scope = self._parent.reachable() if self._parent is not None else {}
        scope.update(self._children)
        return scope

    def build_chain(
        self, attach: Callable[[str, Ruleset, Tuple[Any, ...]], T]
    ) -> Dict[str, Callable[..., T]]:
        """Build callable entry points for every name reachable from this node.

        The parent's chain is built first and this node's children are
        installed last, so deeper children override same-named shallower
        ones. Calling an entry point invokes ``attach`` with the child's name
        segment, the child node and the call arguments.

        Args:
            attach: Function performing the chain step

        Returns:
            Dictionary mapping names to entry points
        """
        chain = self._parent.build_chain(attach) if self._parent is not None else {}

        def make_handler(key: str, child: Ruleset) -> Callable[..., T]:
            def handler(*args: Any) -> T:
                return attach(key, child, args)

            handler.__name__ = key
            return handler

        for key, child in self._children.items():
            chain[key] = make_handler(key, child)
        return chain

    def walk(self, include_self: bool = True) -> Iterator[Ruleset]:
        """Iterate this node's subtree breadth-first."""
        queue: Deque[Ruleset] = deque([self])
        while queue:
            node = queue.popleft()
            if include_self or node is not self:
                yield node
            queue.extend(node._children.values())

    def definitions(self) -> Dict[str, type[Rule]]:
        """All rule definitions in this subtree keyed by dotted name."""
        return {node.name: node._node for node in self.walk() if node._node is not None}

    def extend(self, rules: Iterable[type[Rule]]) -> Ruleset:
        """Register every rule from an iterable (e.g. a module's ``RULES``)."""
        return self.register(*rules)

    def as_string(self, delim: str = " ", multiline: bool = False) -> str:
        """Get a parenthesized string representation of this subtree.

        Args:
            delim: The indentation between levels
            multiline: If True, puts each node on its own line

        Returns:
            String representation, e.g. ``(<root> (string min max) required)``
        """
        label = self._segment or "<root>"
        if not self._children:
            return label
        btwn = "\n" if multiline else ""
        result = "(" + label
        for child in self._children.values():
            d = (child.depth if multiline else 1) * delim
            result += btwn + d + child.as_string(delim=delim, multiline=multiline)
        return result + ")"

    def build_dot(
        self, node_name_fn: Callable[[Ruleset], str] | None = None, **kwargs: Any
    ) -> graphviz.graphs.Digraph:
        """Build a Graphviz Digraph for visualizing this rule namespace.

        Args:
            node_name_fn: Optional function to generate node labels. Defaults
                to the segment, suffixed with ``*`` for nodes holding a rule.
            **kwargs: Additional keyword arguments passed to graphviz.Digraph

        Returns:
            A graphviz.Digraph object representing this subtree
        """
        if node_name_fn is None:
            def node_name_fn(n: Ruleset) -> str:
                label = n.segment or "<root>"
                return f"{label}*" if n.node is not None else label
        dot = graphviz.Digraph(**kwargs)
        ids: Dict[int, int] = {}
        for idx, node in enumerate(self.walk()):
            ids[id(node)] = idx
            dot.node(f"N_{idx:03}", node_name_fn(node))
        for node in self.walk():
            for child in node._children.values():
                dot.edge(f"N_{ids[id(node)]:03}", f"N_{ids[id(child)]:03}")
        return dot
