"""
Document Assembler

Builds the Markdown artifacts written to disk: the technical specification
(summary, visual description, implementation guide, raw design data) and the
plain design-data export.
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from errors import StorageError
from models import FileContext, NodeBase
from outline import count_nodes

logger = logging.getLogger(__name__)

IMPLEMENTATION_CHECKLIST = """\
- [ ] Recreate the component hierarchy shown in the structure outline
- [ ] Extract colors and typography into shared design tokens
- [ ] Apply spacing, padding and sizing from the geometry sections
- [ ] Add borders, corner radii and shadows from the appearance sections
- [ ] Export icons and images with `download_figma_images`
- [ ] Verify responsive behavior at common breakpoints
- [ ] Check accessibility: semantic elements, labels, contrast and focus order
"""

CLOSING_NOTES = """\
## 📌 Notes

- Measurements are taken from Figma's absolute bounding boxes and are expressed in pixels.
- Purposes are inferred from layer names and types; confirm them with the design team.
- Regenerate this document after the design changes; the raw data section diffs line by line.

---
*Generated by Figma Design MCP*
"""


def sanitize_file_name(title: str) -> str:
    """Lowercase `title` and collapse every non-alphanumeric run into a single dash."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def complexity_label(node_count: int) -> str:
    if node_count > 5:
        return "High"
    if node_count > 2:
        return "Medium"
    return "Low"


def _timestamp(generated_at: Optional[datetime]) -> str:
    return (generated_at or datetime.now(timezone.utc)).isoformat()


def assemble_document(
    node: NodeBase,
    file_context: FileContext,
    descriptor_text: str,
    outline_text: str,
    raw_serialized_tree: str,
    file_key: str,
    node_id: Optional[str] = None,
    title: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Compose the technical specification for `node` in its fixed section order."""
    node_count = count_nodes(node)
    heading = title or f"{node.label} - Technical Specification"

    sections = [
        f"# {heading}\n\n"
        "## 📋 Metadata\n"
        f"- **File Key**: {file_key}\n"
        f"- **File Name**: {file_context.name}\n"
        f"- **Node ID**: {node_id or 'Full file'}\n"
        f"- **Root Element**: {node.label} ({node.type})\n"
        f"- **Generated**: {_timestamp(generated_at)}\n"
        f"- **Last Modified**: {file_context.last_modified or 'Unknown'}\n",

        "## 🧭 Executive Summary\n\n"
        f"This document specifies **{node.label}**, a {node.type} containing {node_count} element(s) in total.\n\n"
        f"- **Complexity**: {complexity_label(node_count)}\n"
        f"- **Global styles**: {len(file_context.global_vars.styles)}\n",

        "# 🖼️ Visual Description\n\n" + descriptor_text.rstrip("\n") + "\n",

        "## 🛠️ Implementation Guide\n\n"
        "### Structure Outline\n\n"
        + outline_text.rstrip("\n") + "\n\n"
        "### Checklist\n\n"
        + IMPLEMENTATION_CHECKLIST,

        "## 📦 Raw Design Data\n\n"
        "```yaml\n"
        + raw_serialized_tree.rstrip("\n") + "\n"
        "```\n",

        CLOSING_NOTES,
    ]
    return "\n".join(sections)


def render_data_document(
    file_name: str,
    file_key: str,
    yaml_text: str,
    node_id: Optional[str] = None,
    depth: Optional[int] = None,
    last_modified: Optional[str] = None,
    exported_at: Optional[datetime] = None,
) -> str:
    """Markdown wrapper around the YAML design data written by get_figma_data_to_file."""
    return (
        f"# {file_name}\n\n"
        "## Metadata\n"
        f"- **File Key**: {file_key}\n"
        f"- **File Name**: {file_name}\n"
        f"- **Node ID**: {node_id or 'Full file'}\n"
        f"- **Depth**: {depth or 'All layers'}\n"
        f"- **Export Date**: {_timestamp(exported_at)}\n"
        f"- **Last Modified**: {last_modified or 'Unknown'}\n\n"
        "## Design Data\n\n"
        "```yaml\n"
        f"{yaml_text.rstrip(chr(10))}\n"
        "```\n\n"
        "---\n"
        "*Generated by Figma Design MCP*\n"
    )


def ensure_markdown_path(file_path: str) -> Path:
    return Path(file_path if file_path.endswith(".md") else f"{file_path}.md")


def write_document(path: Path, content: str) -> int:
    """Write `content` to `path`, creating parent directories. Returns the size in bytes."""
    data = content.encode("utf-8")
    try:
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"📁 Created directory: {path.parent}")
        path.write_bytes(data)
    except OSError as e:
        raise StorageError({
            "code": "storage_error",
            "message": f"Failed to write {path}: {e}",
            "details": {"path": str(path)},
        }) from e
    logger.info(f"💾 Document saved to: {path}")
    return len(data)
