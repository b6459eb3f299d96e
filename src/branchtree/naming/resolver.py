"""
Identifier resolution for specification nodes.

Identifiers are derived, never stored: each one is recomputed from the titles of
a node's ancestors, its kind and its own title. Guards (conditions) and test
functions (actions) share one namespace per file; collisions are broken by a
numeric suffix in depth-first, left-to-right order, so the same tree always
yields the same names.
"""

import re
from collections.abc import Sequence

from attrs import field, frozen
from inflection import camelize, transliterate

from branchtree.core.tree_node import NodeKind, SpecNode, Specification
from branchtree.core.types import TitlePath
from branchtree.exceptions import IdentifierCollisionError, IdentifierError
from branchtree.naming.policy import DEFAULT_POLICY, PolicyLike

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")
_IDENTIFIER_START = re.compile(r"^[A-Za-z_]")

MAX_SUFFIX_ATTEMPTS = 1000


def sanitize(text: str) -> str:
    """Turn '-' into '_' and drop every other non-identifier character."""
    return _NON_IDENTIFIER.sub("", text.replace("-", "_"))


def title_segment(title: str, kind: NodeKind) -> str:
    """
    Convert a node title into its PascalCase name segment.

    Conditions keep their keyword as lead word; actions drop the leading 'it'.

    Params:
        title: Node title as written in the tree file
        kind: Kind of the node

    Returns:
        The sanitized segment

    Raises:
        IdentifierError: When nothing is left after sanitizing
    """
    words = transliterate(title).split()
    if kind is NodeKind.ACTION and words and words[0].casefold() == "it":
        words = words[1:]

    segment = sanitize("".join(camelize(word) for word in words))
    if not segment:
        raise IdentifierError(title)
    return segment


def contract_identifier(title: str) -> str:
    """
    Convert the root title into a container (contract) name.

    Raises:
        IdentifierError: When the title sanitizes to nothing or starts with a digit
    """
    name = sanitize(transliterate(title.strip()))
    if not name:
        raise IdentifierError(title)
    if not _IDENTIFIER_START.match(name):
        raise IdentifierError(title, "does not start with a letter or underscore")
    return name


def resolve_identifier(
    ancestor_titles: Sequence[str],
    kind: NodeKind,
    title: str,
    policy: PolicyLike = DEFAULT_POLICY,
) -> str:
    """
    Resolve the undisambiguated identifier of one node.

    This is a pure function of its arguments.

    Params:
        ancestor_titles: Titles of the ancestor conditions, outermost first (root excluded)
        kind: Kind of the node
        title: Title of the node
        policy: Naming policy for test functions

    Returns:
        Guard name for conditions ('whenA_WhenB'), test-function name for actions

    Raises:
        IdentifierError: When a title sanitizes to nothing
    """
    segments = [title_segment(ancestor, NodeKind.CONDITION) for ancestor in ancestor_titles]
    segments.append(title_segment(title, kind))
    chain = "_".join(segments)

    match kind:
        case NodeKind.CONDITION:
            return chain[0].lower() + chain[1:]
        case NodeKind.ACTION:
            return policy.test_name(chain, policy.is_expected_failure(title))


class IdentifierScope:
    """Namespace of one generated or checked file."""

    def __init__(self):
        self._taken: set[str] = set()

    def claim(self, identifier: str) -> str:
        """
        Reserve an identifier, suffixing it when already taken.

        Params:
            identifier: The resolved identifier

        Returns:
            The identifier itself, or the first free 'identifier_N' for N >= 2

        Raises:
            IdentifierCollisionError: When no free suffix is found
        """
        if identifier not in self._taken:
            self._taken.add(identifier)
            return identifier

        for number in range(2, MAX_SUFFIX_ATTEMPTS + 2):
            candidate = f"{identifier}_{number}"
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate

        raise IdentifierCollisionError(identifier, MAX_SUFFIX_ATTEMPTS)


@frozen
class ResolvedNode:
    """
    A specification node paired with its final identifier.

    Params:
        node: The specification node
        identifier: Disambiguated identifier (the contract name at the root)
        path: Titles from below the root down to this node (empty at the root)
        guards: Guard identifiers of the ancestor conditions, outermost first
        children: Resolved children in specification order
    """

    node: SpecNode
    identifier: str
    path: TitlePath = ()
    guards: tuple[str, ...] = ()
    children: tuple["ResolvedNode", ...] = field(default=(), converter=tuple)

    @property
    def is_container(self) -> bool:
        return self.node.kind is not NodeKind.ACTION

    def walk(self):
        """Iterate over all resolved descendants depth-first, left-to-right."""
        for child in self.children:
            yield child
            yield from child.walk()


def resolve_specification(spec: Specification, policy: PolicyLike = DEFAULT_POLICY) -> ResolvedNode:
    """
    Resolve every node of a specification.

    Params:
        spec: The parsed specification
        policy: Naming policy for test functions

    Returns:
        The resolved root, whose identifier is the contract name

    Raises:
        IdentifierError: When a title sanitizes to nothing
        IdentifierCollisionError: When disambiguation fails
    """
    scope = IdentifierScope()

    def resolve(node: SpecNode, ancestors: tuple[str, ...], guards: tuple[str, ...]) -> ResolvedNode:
        identifier = scope.claim(resolve_identifier(ancestors, node.kind, node.title, policy))
        children = []
        if node.kind is NodeKind.CONDITION:
            children = [
                resolve(child, ancestors + (node.title,), guards + (identifier,))
                for child in node.children
            ]
        return ResolvedNode(
            node=node,
            identifier=identifier,
            path=ancestors + (node.title,),
            guards=guards,
            children=children,
        )

    return ResolvedNode(
        node=spec.root,
        identifier=contract_identifier(spec.root.title),
        children=[resolve(child, (), ()) for child in spec.root.children],
    )
