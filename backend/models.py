"""
Design Models - Typed view of the Figma REST payload

Nodes are a closed set of variants keyed on `type`. Each variant declares only
the fields it can carry, and the payload is validated once in `parse_node()`
when it enters the process. Everything downstream works on these models.
"""

from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class FigmaModel(BaseModel):
    """Wire names are camelCase, Python names snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ============================================
# ============ PAINTS & STYLES ===============
# ============================================

class RGBColor(FigmaModel):
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: Optional[float] = None


class BoundingBox(FigmaModel):
    x: Number = 0
    y: Number = 0
    width: Number = 0
    height: Number = 0


class Paint(FigmaModel):
    type: str
    visible: bool = True
    color: Optional[RGBColor] = None
    opacity: Optional[float] = None
    image_ref: Optional[str] = None


class Offset(FigmaModel):
    x: Optional[Number] = None
    y: Optional[Number] = None


class Effect(FigmaModel):
    type: str
    visible: bool = True
    color: Optional[RGBColor] = None
    offset: Optional[Offset] = None
    radius: Optional[Number] = None


class TypeStyle(FigmaModel):
    font_family: Optional[str] = None
    font_size: Optional[Number] = None
    font_weight: Optional[Number] = None
    text_align_horizontal: Optional[str] = None
    text_align_vertical: Optional[str] = None
    line_height_px: Optional[Number] = None


# ============================================
# ============ NODE CAPABILITIES =============
# ============================================

class NodeBase(FigmaModel):
    id: str
    name: Optional[str] = None
    type: str
    visible: bool = True

    @property
    def label(self) -> str:
        return self.name or "Unnamed"


class Geometry(FigmaModel):
    absolute_bounding_box: Optional[BoundingBox] = None
    layout_align: Optional[str] = None
    layout_grow: Optional[Number] = None


class Appearance(FigmaModel):
    fills: Tuple[Paint, ...] = ()
    strokes: Tuple[Paint, ...] = ()
    stroke_weight: Optional[Number] = None
    effects: Tuple[Effect, ...] = ()


class Corners(FigmaModel):
    corner_radius: Optional[Number] = None


class AutoLayout(FigmaModel):
    layout_mode: Optional[str] = None
    padding_top: Number = 0
    padding_right: Number = 0
    padding_bottom: Number = 0
    padding_left: Number = 0
    item_spacing: Optional[Number] = None

    @property
    def has_padding(self) -> bool:
        return any((self.padding_top, self.padding_right, self.padding_bottom, self.padding_left))


class Container(FigmaModel):
    children: Tuple["DesignNode", ...] = ()


# ============================================
# ============== NODE VARIANTS ===============
# ============================================

class DocumentNode(NodeBase, Container):
    type: Literal["DOCUMENT"]


class CanvasNode(NodeBase, Container):
    type: Literal["CANVAS"]
    background_color: Optional[RGBColor] = None


class FrameNode(NodeBase, Geometry, Appearance, Corners, AutoLayout, Container):
    type: Literal["FRAME", "COMPONENT", "COMPONENT_SET", "SECTION"]


class InstanceNode(NodeBase, Geometry, Appearance, Corners, AutoLayout, Container):
    type: Literal["INSTANCE"]
    component_id: Optional[str] = None


class GroupNode(NodeBase, Geometry, Appearance, Container):
    type: Literal["GROUP"]


class RectangleNode(NodeBase, Geometry, Appearance, Corners):
    type: Literal["RECTANGLE"]


class VectorNode(NodeBase, Geometry, Appearance, Corners):
    type: Literal["VECTOR", "ELLIPSE", "LINE", "STAR", "POLYGON", "BOOLEAN_OPERATION"]


class TextNode(NodeBase, Geometry, Appearance):
    type: Literal["TEXT"]
    characters: Optional[str] = None
    style: Optional[TypeStyle] = None


class GenericNode(NodeBase, Geometry, Appearance, Container):
    """Any node type without a dedicated variant (SLICE, STICKY, WIDGET, ...)."""

    type: str


_NODE_TAGS: Dict[str, str] = {
    "DOCUMENT": "document",
    "CANVAS": "canvas",
    "FRAME": "frame",
    "COMPONENT": "frame",
    "COMPONENT_SET": "frame",
    "SECTION": "frame",
    "INSTANCE": "instance",
    "GROUP": "group",
    "RECTANGLE": "rectangle",
    "VECTOR": "vector",
    "ELLIPSE": "vector",
    "LINE": "vector",
    "STAR": "vector",
    "POLYGON": "vector",
    "BOOLEAN_OPERATION": "vector",
    "TEXT": "text",
}


def _node_tag(value: Any) -> str:
    if isinstance(value, dict):
        node_type = value.get("type")
    else:
        node_type = getattr(value, "type", None)
    return _NODE_TAGS.get(node_type, "generic")


DesignNode = Annotated[
    Union[
        Annotated[DocumentNode, Tag("document")],
        Annotated[CanvasNode, Tag("canvas")],
        Annotated[FrameNode, Tag("frame")],
        Annotated[InstanceNode, Tag("instance")],
        Annotated[GroupNode, Tag("group")],
        Annotated[RectangleNode, Tag("rectangle")],
        Annotated[VectorNode, Tag("vector")],
        Annotated[TextNode, Tag("text")],
        Annotated[GenericNode, Tag("generic")],
    ],
    Discriminator(_node_tag),
]

for _model in (Container, DocumentNode, CanvasNode, FrameNode, InstanceNode, GroupNode, GenericNode):
    _model.model_rebuild()

_NODE_ADAPTER: TypeAdapter = TypeAdapter(DesignNode)


def parse_node(data: Dict[str, Any]) -> NodeBase:
    """Validate a raw REST node (and its subtree) into a typed DesignNode."""
    return _NODE_ADAPTER.validate_python(data)


def child_nodes(node: NodeBase) -> Tuple[NodeBase, ...]:
    """Children of a node, or an empty tuple for leaf variants."""
    if isinstance(node, Container):
        return node.children
    return ()


# ============================================
# ============ FILE-LEVEL MODELS =============
# ============================================

class GlobalVars(FigmaModel):
    """Deduplicated style values, referenced from simplified nodes by id."""

    styles: Dict[str, Any] = Field(default_factory=dict)


class FileContext(FigmaModel):
    name: str = "Untitled"
    last_modified: Optional[str] = None
    global_vars: GlobalVars = Field(default_factory=GlobalVars)


class SimplifiedDesign(FigmaModel):
    name: str = "Untitled"
    last_modified: Optional[str] = None
    thumbnail_url: Optional[str] = None
    nodes: Tuple[DesignNode, ...] = ()
    global_vars: GlobalVars = Field(default_factory=GlobalVars)

    @property
    def file_context(self) -> FileContext:
        return FileContext(name=self.name, last_modified=self.last_modified, global_vars=self.global_vars)


# ============================================
# ============== EXPORT MODELS ===============
# ============================================

class SvgOptions(FigmaModel):
    outline_text: bool = Field(default=True, description="Whether to outline text in SVG exports.")
    include_id: bool = Field(default=False, description="Whether to include IDs in SVG exports.")
    simplify_stroke: bool = Field(default=True, description="Whether to simplify strokes in SVG exports.")


class ExportRequest(FigmaModel):
    node_id: str = Field(description="The ID of the Figma image node to fetch, formatted as 1234:5678")
    image_ref: Optional[str] = Field(
        default=None,
        description="If a node has an imageRef fill, include it here. Leave blank when downloading vector SVG images.",
    )
    file_name: str = Field(description="The local name for saving the fetched file")

    @property
    def file_type(self) -> Literal["svg", "png"]:
        return "svg" if self.file_name.endswith(".svg") else "png"


class FillRequest(FigmaModel):
    node_id: str
    image_ref: str
    file_name: str


class RenderRequest(FigmaModel):
    node_id: str
    file_name: str
    file_type: Literal["svg", "png"]
