"""
Design Descriptor - Visual description of a Figma node tree

Walks a typed node tree depth-first (pre-order) and writes a Markdown report
covering identification, geometry, colors, typography, borders, effects and
text content of every node, followed by file-level context. The output is a
pure function of the tree and the file context.
"""

import logging
import math
from typing import List, Optional

from colors import rgb_to_hex
from models import (
    Appearance,
    AutoLayout,
    Corners,
    FileContext,
    Geometry,
    NodeBase,
    TextNode,
    child_nodes,
)
from purpose import infer_purpose

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

IMPLEMENTATION_RECOMMENDATIONS = (
    "\n## 🔧 Implementation Recommendations\n\n"
    "This visual description has been automatically generated based on Figma data. "
    "To implement this design:\n\n"
    "1. **Use the hierarchical structure** described to organize your HTML/JSX\n"
    "2. **Implement CSS styles** based on the specified measurements and colors\n"
    "3. **Consider responsiveness** by adapting fixed measurements to relative units\n"
    "4. **Optimize accessibility** by adding ARIA attributes and semantic tags\n\n"
)


def _num(value) -> str:
    """Render 16.0 as 16 and keep real fractions as they are."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _percent(opacity: Optional[float]) -> int:
    value = 1.0 if opacity is None else opacity
    return int(math.floor(value * 100 + 0.5))


class DescriptorEngine:
    """Produces the per-node descriptor blocks and the global file context."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth

    def describe(self, root: NodeBase, file_context: FileContext) -> str:
        parts: List[str] = []
        self._describe_node(root, 0, parts)
        parts.append(self._global_context(file_context))
        parts.append(IMPLEMENTATION_RECOMMENDATIONS)
        text = "".join(parts)
        logger.debug(f"🧾 Described '{root.label}' ({len(text)} chars)")
        return text

    # Internal
    def _describe_node(self, node: NodeBase, level: int, parts: List[str]) -> None:
        indent = "  " * level
        marker = "🏗️ " if level == 0 else "📦 "

        parts.append(f"{indent}## {marker}{node.name or 'Unnamed element'} ({node.type})\n\n")
        parts.append(f"{indent}### 🎯 Identification and Purpose\n")
        parts.append(f"{indent}- **Name**: {node.label}\n")
        parts.append(f"{indent}- **Type**: {node.type}\n")
        parts.append(f"{indent}- **Apparent function**: {infer_purpose(node)}\n\n")

        geometry = self._geometry_lines(node, indent)
        if geometry:
            parts.append(f"{indent}### 📐 Geometry and Position\n")
            parts.extend(geometry)
            parts.append("\n")

        appearance = self._appearance_lines(node, indent)
        if appearance:
            parts.append(f"{indent}### 🎨 Visual Appearance\n")
            parts.extend(appearance)
            parts.append("\n")

        if isinstance(node, TextNode) and node.characters is not None:
            parts.append(f"{indent}### 📝 Content\n")
            parts.append(f'{indent}- **Text**: "{node.characters}"\n\n')

        children = child_nodes(node)
        if not children:
            return

        parts.append(f"{indent}### 👥 Child Elements ({len(children)})\n\n")
        if level >= self.max_depth:
            logger.warning(f"⚠️ Nesting limit ({self.max_depth}) reached at '{node.label}'; skipping {len(children)} children")
            parts.append(
                f"{indent}- _Nesting limit of {self.max_depth} levels reached; "
                f"{len(children)} child element(s) not described_\n\n"
            )
            return

        for index, child in enumerate(children):
            self._describe_node(child, level + 1, parts)
            if index < len(children) - 1:
                parts.append(f"{indent}---\n\n")

    def _geometry_lines(self, node: NodeBase, indent: str) -> List[str]:
        lines: List[str] = []
        if isinstance(node, Geometry):
            box = node.absolute_bounding_box
            if box is not None:
                lines.append(f"{indent}- **Position**: x={_num(box.x)}px, y={_num(box.y)}px\n")
                lines.append(f"{indent}- **Dimensions**: {_num(box.width)}px × {_num(box.height)}px\n")
            if node.layout_align:
                lines.append(f"{indent}- **Alignment**: {node.layout_align}\n")
            if node.layout_grow is not None:
                lines.append(f"{indent}- **Growth**: {_num(node.layout_grow)}\n")
        if isinstance(node, AutoLayout):
            if node.has_padding:
                lines.append(
                    f"{indent}- **Padding**: top={_num(node.padding_top)}px, right={_num(node.padding_right)}px, "
                    f"bottom={_num(node.padding_bottom)}px, left={_num(node.padding_left)}px\n"
                )
            if node.item_spacing is not None:
                lines.append(f"{indent}- **Item spacing**: {_num(node.item_spacing)}px\n")
        return lines

    def _appearance_lines(self, node: NodeBase, indent: str) -> List[str]:
        lines: List[str] = []
        if isinstance(node, Appearance):
            colors = [
                f"{indent}- **Fill {index + 1}**: {rgb_to_hex(fill.color)} (Opacity: {_percent(fill.opacity)}%)\n"
                for index, fill in enumerate(node.fills)
                if fill.type == "SOLID"
            ]
            if colors:
                lines.append(f"{indent}#### **Colors:**\n")
                lines.extend(colors)

        if isinstance(node, TextNode) and node.style is not None:
            style = node.style
            size = f"{_num(style.font_size)}px" if style.font_size else "Not specified"
            weight = _num(style.font_weight) if style.font_weight else "Normal"
            lines.append(f"{indent}#### **Typography:**\n")
            lines.append(f"{indent}- **Font**: {style.font_family or 'Not specified'}\n")
            lines.append(f"{indent}- **Size**: {size}\n")
            lines.append(f"{indent}- **Weight**: {weight}\n")
            if style.text_align_horizontal:
                lines.append(f"{indent}- **Horizontal alignment**: {style.text_align_horizontal}\n")
            if style.text_align_vertical:
                lines.append(f"{indent}- **Vertical alignment**: {style.text_align_vertical}\n")
            if style.line_height_px:
                lines.append(f"{indent}- **Line height**: {_num(style.line_height_px)}px\n")

        if isinstance(node, Appearance):
            weight = node.stroke_weight if node.stroke_weight is not None else 1
            borders = [
                f"{indent}- **Border {index + 1}**: {rgb_to_hex(stroke.color)}, width={_num(weight)}px\n"
                for index, stroke in enumerate(node.strokes)
                if stroke.type == "SOLID"
            ]
            radius = node.corner_radius if isinstance(node, Corners) else None
            if borders or radius is not None:
                lines.append(f"{indent}#### **Borders:**\n")
                lines.extend(borders)
                if radius is not None:
                    lines.append(f"{indent}- **Corner radius**: {_num(radius)}px\n")

            shadows = []
            for index, effect in enumerate(node.effects):
                if effect.type != "DROP_SHADOW":
                    continue
                offset_x = effect.offset.x if effect.offset and effect.offset.x is not None else 0
                offset_y = effect.offset.y if effect.offset and effect.offset.y is not None else 0
                blur = effect.radius if effect.radius is not None else 0
                shadows.append(
                    f"{indent}- **Shadow {index + 1}**: color={rgb_to_hex(effect.color)}, "
                    f"offset=({_num(offset_x)}px, {_num(offset_y)}px), blur={_num(blur)}px\n"
                )
            if shadows:
                lines.append(f"{indent}#### **Effects:**\n")
                lines.extend(shadows)
        return lines

    def _global_context(self, file_context: FileContext) -> str:
        text = "\n## 🌐 Global File Context\n\n"
        text += f"- **File name**: {file_context.name}\n"
        text += f"- **Last modified**: {file_context.last_modified or 'Not specified'}\n"
        styles = file_context.global_vars.styles
        if styles:
            text += f"- **Global variables detected**: {len(styles)}\n"
        return text


def describe_design(root: NodeBase, file_context: FileContext, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Convenience wrapper around DescriptorEngine.describe()."""
    return DescriptorEngine(max_depth=max_depth).describe(root, file_context)
