"""Loosely-typed node tree built from ONIX XML.

A node is one of:

- ``None``: the element is absent
- ``str``: a leaf element's trimmed text
- ``list``: repeated sibling elements with the same tag
- ``dict``: an element with children and/or attributes

Attributes are merged into the dict alongside child elements under
``"@name"`` keys, so they never collide with element names during tag
normalization. The ``"_"`` key holds text only for elements that carry text
of their own: a leaf with attributes, real mixed content, or a ``textformat``
container (XHTML inside ``Text``). Pure composites such as ``Product`` have
no ``"_"`` key. Accessors below are total over the union: missing structure
yields ``None`` or an empty list, never an exception.
"""

import xml.etree.ElementTree as ET
from typing import Union

Node = Union[None, str, list["Node"], dict[str, "Node"]]

TEXT_KEY = "_"
ATTRIBUTE_PREFIX = "@"

# Attribute marking an element's children as formatted text, not ONIX structure.
TEXT_FORMAT_ATTRIBUTE = "textformat"


def local_name(tag: str) -> str:
    """Strip an ElementTree namespace prefix (``{uri}Name`` -> ``Name``)."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _holds_text(element: ET.Element, attributes: dict[str, str]) -> bool:
    """True when an element with children carries text of its own."""
    if TEXT_FORMAT_ATTRIBUTE in attributes:
        return True
    if not _is_blank(element.text):
        return True
    return any(not _is_blank(child.tail) for child in element)


def element_to_node(element: ET.Element) -> Node:
    """
    Convert an ElementTree element into a node.

    Args:
        element: Parsed XML element

    Returns:
        Text for a leaf without attributes, otherwise a dict of attributes and
        children (repeated children collapsed into lists)
    """
    children = list(element)
    attributes = {local_name(name): value.strip() for name, value in element.attrib.items()}

    if not children and not attributes:
        return (element.text or "").strip()

    node: dict[str, Node] = {
        f"{ATTRIBUTE_PREFIX}{name}": value for name, value in attributes.items()
    }
    for child in children:
        key = local_name(child.tag)
        value = element_to_node(child)
        if key not in node:
            node[key] = value
            continue
        existing = node[key]
        if isinstance(existing, list):
            existing.append(value)
        else:
            node[key] = [existing, value]

    if not children:
        text = (element.text or "").strip()
    elif _holds_text(element, attributes):
        text = "".join(element.itertext()).strip()
    else:
        text = ""
    if text:
        node[TEXT_KEY] = text
    return node


def as_list(node: Node) -> list[Node]:
    """Return repeated elements as a list; a singleton becomes a one-item list."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def first(node: Node) -> Node:
    """Return the first of possibly repeated elements."""
    if isinstance(node, list):
        return node[0] if node else None
    return node


def child(node: Node, *path: str) -> Node:
    """
    Walk dict keys, taking the first element wherever a list is met.

    Args:
        node: Starting node
        *path: Keys to follow

    Returns:
        Node at the end of the path or None
    """
    current = node
    for key in path:
        current = first(current)
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def text(node: Node) -> str | None:
    """
    Resolve a node to its trimmed text.

    Lists resolve to their first element; dicts resolve to their ``"_"``
    text. Empty text counts as absent.
    """
    if node is None:
        return None
    if isinstance(node, str):
        value = node.strip()
        return value if value != "" else None
    if isinstance(node, list):
        return text(first(node))
    return text(node.get(TEXT_KEY))


def child_text(node: Node, *path: str) -> str | None:
    """Shortcut for ``text(child(node, *path))``."""
    return text(child(node, *path))


def get_ignore_case(node: Node, key: str) -> Node:
    """Look up a dict key ignoring case (used for root-level tags)."""
    node = first(node)
    if not isinstance(node, dict):
        return None
    wanted = key.lower()
    for name, value in node.items():
        if name.lower() == wanted:
            return value
    return None
