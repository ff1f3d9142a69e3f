"""
Response Simplifier

Turns raw Figma REST payloads (GET /files/:key and GET /files/:key/nodes) into
a SimplifiedDesign, and serializes a design into the compact YAML structure
returned to assistants. Repeated style values (fills, strokes, effects, text
styles, layouts) are stored once under `globalVars.styles` and referenced from
nodes by id.
"""

import hashlib
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import yaml

from colors import rgb_to_hex
from errors import NotFoundError
from models import (
    Appearance,
    AutoLayout,
    Corners,
    Effect,
    Geometry,
    GlobalVars,
    NodeBase,
    Paint,
    SimplifiedDesign,
    TextNode,
    child_nodes,
    parse_node,
)

logger = logging.getLogger(__name__)


class StyleRegistry:
    """Collects style values and hands out stable ids for them."""

    def __init__(self) -> None:
        self.styles: Dict[str, Any] = {}

    def ref(self, prefix: str, value: Any) -> str:
        key = json.dumps(value, sort_keys=True, ensure_ascii=False)
        var_id = f"{prefix}_{hashlib.sha1(key.encode('utf-8')).hexdigest()[:6].upper()}"
        self.styles.setdefault(var_id, value)
        return var_id


# ============================================
# ========= REST PAYLOAD -> DESIGN ===========
# ============================================

def simplify_file_response(payload: Dict[str, Any]) -> SimplifiedDesign:
    """Simplify a GET /files/:key response. Top-level nodes are the file's pages."""
    document = payload.get("document")
    if not document:
        raise NotFoundError({"code": "not_found", "message": "Figma file has no document"})
    pages = [parse_node(page) for page in document.get("children") or []]
    return _build_design(payload, pages)


def simplify_nodes_response(payload: Dict[str, Any], node_ids: Optional[List[str]] = None) -> SimplifiedDesign:
    """Simplify a GET /files/:key/nodes response, keeping the requested order."""
    entries = payload.get("nodes") or {}
    keys = node_ids or list(entries.keys())
    nodes = []
    for key in keys:
        entry = entries.get(key)
        if not entry or not entry.get("document"):
            raise NotFoundError({
                "code": "not_found",
                "message": f"Node {key} not found in file",
                "details": {"node_id": key},
            })
        nodes.append(parse_node(entry["document"]))
    if not nodes:
        raise NotFoundError({"code": "not_found", "message": "No nodes returned for request"})
    return _build_design(payload, nodes)


def _build_design(payload: Dict[str, Any], nodes: List[NodeBase]) -> SimplifiedDesign:
    _, registry = simplify_nodes(nodes)
    logger.debug(f"🧮 Simplified {len(nodes)} root node(s), {len(registry.styles)} global style(s)")
    return SimplifiedDesign(
        name=payload.get("name") or "Untitled",
        last_modified=payload.get("lastModified"),
        thumbnail_url=payload.get("thumbnailUrl"),
        nodes=tuple(nodes),
        global_vars=GlobalVars(styles=registry.styles),
    )


# ============================================
# ========= DESIGN -> SERIALIZABLE ===========
# ============================================

def _paint_value(paint: Paint) -> Any:
    if paint.type == "SOLID":
        hex_color = rgb_to_hex(paint.color)
        if paint.opacity is None or paint.opacity == 1:
            value: Any = hex_color
        else:
            value = {"hex": hex_color, "opacity": paint.opacity}
    elif paint.type == "IMAGE":
        value = {"type": "IMAGE", "imageRef": paint.image_ref}
    else:
        value = {"type": paint.type}
    if not paint.visible:
        value = {"paint": value, "visible": False}
    return value


def _effect_value(effect: Effect) -> Dict[str, Any]:
    value: Dict[str, Any] = {"type": effect.type}
    if effect.color is not None:
        value["color"] = rgb_to_hex(effect.color)
    if effect.offset is not None:
        value["offset"] = [effect.offset.x or 0, effect.offset.y or 0]
    if effect.radius is not None:
        value["radius"] = effect.radius
    if not effect.visible:
        value["visible"] = False
    return value


def _layout_value(node: NodeBase) -> Dict[str, Any]:
    layout: Dict[str, Any] = {}
    if isinstance(node, AutoLayout):
        if node.layout_mode and node.layout_mode != "NONE":
            layout["mode"] = node.layout_mode
        if node.has_padding:
            layout["padding"] = [node.padding_top, node.padding_right, node.padding_bottom, node.padding_left]
        if node.item_spacing is not None:
            layout["gap"] = node.item_spacing
    if isinstance(node, Geometry):
        if node.layout_align:
            layout["align"] = node.layout_align
        if node.layout_grow is not None:
            layout["grow"] = node.layout_grow
    return layout


def simplify_node(node: NodeBase, registry: StyleRegistry) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": node.id, "name": node.label, "type": node.type}
    if not node.visible:
        out["visible"] = False

    if isinstance(node, Geometry) and node.absolute_bounding_box is not None:
        box = node.absolute_bounding_box
        out["boundingBox"] = {"x": box.x, "y": box.y, "width": box.width, "height": box.height}

    if isinstance(node, TextNode):
        if node.characters is not None:
            out["text"] = node.characters
        if node.style is not None:
            style = node.style.model_dump(by_alias=True, exclude_none=True)
            if style:
                out["textStyle"] = registry.ref("style", style)

    if isinstance(node, Appearance):
        if node.fills:
            out["fills"] = registry.ref("fill", [_paint_value(p) for p in node.fills])
        if node.strokes:
            out["strokes"] = registry.ref("stroke", [_paint_value(p) for p in node.strokes])
            out["strokeWeight"] = node.stroke_weight if node.stroke_weight is not None else 1
        if node.effects:
            out["effects"] = registry.ref("effect", [_effect_value(e) for e in node.effects])

    if isinstance(node, Corners) and node.corner_radius is not None:
        out["borderRadius"] = f"{node.corner_radius}px"

    layout = _layout_value(node)
    if layout:
        out["layout"] = registry.ref("layout", layout)

    children = child_nodes(node)
    if children:
        out["children"] = [simplify_node(child, registry) for child in children]
    return out


def simplify_nodes(nodes: List[NodeBase]) -> Tuple[List[Dict[str, Any]], StyleRegistry]:
    registry = StyleRegistry()
    return [simplify_node(node, registry) for node in nodes], registry


def serialize_design(design: SimplifiedDesign) -> Dict[str, Any]:
    """Return the {metadata, nodes, globalVars} structure sent to assistants."""
    nodes, registry = simplify_nodes(list(design.nodes))
    metadata: Dict[str, Any] = {"name": design.name}
    if design.last_modified:
        metadata["lastModified"] = design.last_modified
    if design.thumbnail_url:
        metadata["thumbnailUrl"] = design.thumbnail_url
    return {
        "metadata": metadata,
        "nodes": nodes,
        "globalVars": {"styles": registry.styles},
    }


def dump_yaml(data: Any) -> str:
    """YAML without line wrapping so exported files diff line by line."""
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, width=float("inf"))
