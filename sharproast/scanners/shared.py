from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from tree_sitter import Node

from ..utils.config import ScanPolicy
from ..utils.findings import Finding

STRING_LITERALS = ("string_literal", "verbatim_string_literal", "raw_string_literal")
MAX_SNIPPET_LINES = 6


@dataclass(frozen=True)
class FileContext:
    """Everything a structural detector may look at for one file.

    ``path`` is what findings report; ``rel_path`` is the path below the scan
    target and is what name-based exclusions are matched against.
    """

    path: str
    rel_path: str
    source: str
    root: Node
    policy: ScanPolicy


def iter_nodes(root: Node, *kinds: str) -> Iterator[Node]:
    # pre-order, so results come out in source order
    stack = [root]
    while stack:
        node = stack.pop()
        if not kinds or node.type in kinds:
            yield node
        stack.extend(reversed(node.children))


def innermost(root: Node, kind: str, matches: Callable[[Node], bool]) -> Iterator[Node]:
    """Nodes of ``kind`` satisfying ``matches`` that enclose no other such node.

    Chained expressions nest (``a.b.c`` holds ``a.b``); this keeps one report
    per chain instead of one per link.
    """
    for node in iter_nodes(root, kind):
        if not matches(node):
            continue
        if any(d != node and matches(d) for d in iter_nodes(node, kind)):
            continue
        yield node


def chained_calls(root: Node, matches: Callable[[Node], bool]) -> Iterator[Node]:
    """Invocations satisfying ``matches``, first link of each call chain only.

    In ``Load(x).Name.Trim()`` the ``Trim`` call holds ``Load(x)`` inside its
    callee, so when both match only ``Load(x)`` is yielded. Calls nested in
    arguments are separate calls and are still yielded on their own.
    """
    for inv in iter_nodes(root, "invocation_expression"):
        if not matches(inv):
            continue
        callee = inv.child_by_field_name("function")
        if callee is not None and any(matches(d) for d in iter_nodes(callee, "invocation_expression")):
            continue
        yield inv


def ancestors(node: Node) -> Iterator[Node]:
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def first_ancestor(node: Node, *kinds: str) -> Optional[Node]:
    for a in ancestors(node):
        if a.type in kinds:
            return a
    return None


def enclosing_method(node: Node) -> Optional[Node]:
    return first_ancestor(node, "method_declaration")


def enclosing_class(node: Node) -> Optional[Node]:
    return first_ancestor(node, "class_declaration")


def node_text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def identifier(decl: Node) -> str:
    return node_text(decl.child_by_field_name("name"))


def attribute_names(decl: Node) -> List[str]:
    names = []
    for attr_list in decl.children:
        if attr_list.type != "attribute_list":
            continue
        for attr in attr_list.named_children:
            if attr.type != "attribute":
                continue
            name = attr.child_by_field_name("name") or attr.named_children[0]
            names.append(node_text(name))
    return names


def has_attribute(decl: Node, *markers: str) -> bool:
    return any(m in name for name in attribute_names(decl) for m in markers)


def callee_text(invocation: Node) -> str:
    return node_text(invocation.child_by_field_name("function"))


def arguments_in(arg_list: Node) -> List[Node]:
    return [a.named_children[-1] for a in arg_list.named_children if a.type == "argument" and a.named_children]


def argument_nodes(invocation: Node) -> List[Node]:
    """Expressions passed to an invocation or object creation, in order."""
    args = invocation.child_by_field_name("arguments")
    if args is None:
        return []
    return arguments_in(args)


def snippet(node: Node) -> str:
    lines = node_text(node).strip().splitlines()
    return "\n".join(lines[:MAX_SNIPPET_LINES])


def make_finding(ctx: FileContext, node: Node, rule_id: str, severity: str, category: str,
                 description: str, code: Optional[str] = None) -> Finding:
    return Finding(
        id=rule_id,
        file_path=ctx.path,
        line_number=line_of(node),
        severity=severity,
        description=description,
        code_snippet=snippet(node) if code is None else code,
        category=category,
    )
