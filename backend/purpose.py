"""
Purpose Classifier

Infers a short human label ("Button", "Header", ...) for a node from its name
and type. Rules are evaluated in order and the first match wins; the order is
part of the output contract, so bump PURPOSE_RULES_VERSION whenever it changes.
"""

from typing import Any, Callable, Tuple

PURPOSE_RULES_VERSION = 1

Predicate = Callable[[str, str], bool]


def _of_type(node_type: str) -> Predicate:
    return lambda name, kind: kind == node_type


def _of_type_named(node_type: str, keyword: str) -> Predicate:
    return lambda name, kind: kind == node_type and keyword in name


def _named(keyword: str) -> Predicate:
    return lambda name, kind: keyword in name


PURPOSE_RULES: Tuple[Tuple[Predicate, str], ...] = (
    (_of_type("TEXT"), "Text element"),
    (_of_type_named("RECTANGLE", "button"), "Button"),
    (_of_type_named("RECTANGLE", "card"), "Card or container"),
    (_of_type_named("FRAME", "header"), "Header"),
    (_of_type_named("FRAME", "footer"), "Footer"),
    (_of_type_named("FRAME", "nav"), "Navigation"),
    (_of_type("INSTANCE"), "Reusable component"),
    (_named("icon"), "Icon"),
    (_named("image"), "Image"),
    (_named("input"), "Input field"),
)


def infer_purpose(node: Any) -> str:
    """Return the apparent function of a node (model or raw mapping)."""
    if isinstance(node, dict):
        name, node_type = node.get("name"), node.get("type")
    else:
        name, node_type = getattr(node, "name", None), getattr(node, "type", None)
    name = (name or "").lower()
    node_type = node_type or ""

    for predicate, label in PURPOSE_RULES:
        if predicate(name, node_type):
            return label
    return f"{node_type.lower()} element"
