import logging
from typing import Any, Dict, List, Optional

from agents import function_tool

from errors import FigmaToolError
from figma_tools import FigmaTools, ToolResult, result_text

logger = logging.getLogger(__name__)


# Global toolset instance (set by the host application)
_toolset: Optional[FigmaTools] = None


def set_toolset(toolset: FigmaTools) -> None:
    """Set the global toolset instance."""
    global _toolset
    _toolset = toolset


def get_toolset() -> FigmaTools:
    """Get the global toolset instance."""
    if _toolset is None:
        raise RuntimeError("Toolset not initialized. Call set_toolset() first.")
    return _toolset


def _unwrap(tool_name: str, result: ToolResult) -> str:
    """Return the result text, or raise a structured error for the agent to self-correct."""
    text = result_text(result)
    if result.get("isError"):
        logger.error(f"❌ Tool {tool_name} failed: {text}")
        raise FigmaToolError({
            "code": "tool_failed",
            "message": text,
            "details": {"tool": tool_name},
        }, command=tool_name)
    return text


# ============================================
# === Category 1: Design data ================
# ============================================

@function_tool(strict_mode=False)
async def get_figma_data(file_key: str, node_id: Optional[str] = None, depth: Optional[int] = None) -> str:
    """Fetch a Figma file (or one node of it) as simplified YAML design data.

    Purpose & Use Case
    --------------------
    The starting point for any implementation task. Returns the simplified node
    tree (ids, names, types, bounding boxes, text) plus a `globalVars.styles`
    table of deduplicated fills, strokes, effects, layouts and text styles that
    nodes reference by id.

    Parameters (Args)
    ------------------
    file_key (str): The file key from a URL like figma.com/(file|design)/<fileKey>/...
    node_id (str, optional): The node id from the URL parameter node-id=<nodeId>.
        Both `1:2` and `1-2` are accepted. Always pass it when the user provides one.
    depth (int, optional): Levels of the tree to traverse. Do NOT use unless the
        user explicitly asks for it.

    Returns
    -------
    (str): YAML with `metadata`, `nodes` and `globalVars` keys.

    Raises (Errors & Pitfalls)
    --------------------------
    FigmaToolError: When the file or node cannot be fetched (bad key, missing
    access, unknown node id).
    """
    logger.info(f"📥 Tool get_figma_data(file_key={file_key}, node_id={node_id}, depth={depth})")
    return _unwrap("get_figma_data", await get_toolset().get_figma_data(file_key, node_id, depth))


@function_tool(strict_mode=False)
async def get_figma_data_to_file(
    file_key: str,
    file_path: str,
    node_id: Optional[str] = None,
    depth: Optional[int] = None,
) -> str:
    """Fetch design data and save it as a Markdown file containing a YAML block.

    Parameters (Args)
    ------------------
    file_key (str): The key of the Figma file.
    file_path (str): Where to save the file. `.md` is appended when missing.
    node_id (str, optional): Node to export instead of the whole file.
    depth (int, optional): Levels of the tree to traverse.

    Returns
    -------
    (str): Confirmation with the saved path and size.
    """
    logger.info(f"💾 Tool get_figma_data_to_file(file_key={file_key}, file_path={file_path})")
    return _unwrap(
        "get_figma_data_to_file",
        await get_toolset().get_figma_data_to_file(file_key, file_path, node_id, depth),
    )


# ============================================
# === Category 2: Description & specs ========
# ============================================

@function_tool(strict_mode=False)
async def generate_visual_description(file_key: str, node_id: Optional[str] = None, depth: Optional[int] = None) -> str:
    """Describe a design node in implementation-ready detail.

    Purpose & Use Case
    --------------------
    Produces a Markdown report walking the node tree in pre-order. Each element
    gets its identification and inferred purpose, geometry, colors (hex),
    typography, borders, effects and text content, followed by a global file
    context and implementation recommendations.

    Parameters (Args)
    ------------------
    file_key (str): The key of the Figma file.
    node_id (str, optional): Node to describe. Without it the first page is described.
    depth (int, optional): Levels of the tree to fetch.

    Returns
    -------
    (str): The Markdown description.

    Agent Guidance
    --------------
    When to Use:
        - Before writing UI code, to understand layout and styling of a screen or component.
    When NOT to Use:
        - When you need machine-readable values; call `get_figma_data` instead.
    """
    logger.info(f"🔎 Tool generate_visual_description(file_key={file_key}, node_id={node_id})")
    return _unwrap(
        "generate_visual_description",
        await get_toolset().generate_visual_description(file_key, node_id, depth),
    )


@function_tool(strict_mode=False)
async def generate_technical_specification(
    file_key: str,
    output_directory: str,
    node_id: Optional[str] = None,
    depth: Optional[int] = None,
    title: Optional[str] = None,
) -> str:
    """Write a technical specification document for a design node.

    The document combines metadata, an executive summary, the visual
    description, a structure outline with an implementation checklist and the
    raw design data. It is saved as `<output_directory>/<sanitized title>.md`.

    Parameters (Args)
    ------------------
    file_key (str): The key of the Figma file.
    output_directory (str): Directory for the document; created when missing.
    node_id (str, optional): Node to specify. Without it the first page is used.
    depth (int, optional): Levels of the tree to fetch.
    title (str, optional): Document title, defaults to "<node name> - Technical Specification".

    Returns
    -------
    (str): Confirmation with the saved path and size.
    """
    logger.info(f"📝 Tool generate_technical_specification(file_key={file_key}, output_directory={output_directory})")
    return _unwrap(
        "generate_technical_specification",
        await get_toolset().generate_technical_specification(file_key, output_directory, node_id, depth, title),
    )


# ============================================
# === Category 3: Assets & exports ===========
# ============================================

@function_tool(strict_mode=False)
async def download_figma_images(
    file_key: str,
    nodes: List[Dict[str, Any]],
    local_path: str,
    png_scale: float = 2,
    svg_options: Optional[Dict[str, Any]] = None,
) -> str:
    """Download PNG/SVG images for image and icon nodes.

    Parameters (Args)
    ------------------
    file_key (str): The key of the Figma file containing the nodes.
    nodes (list[dict]): One entry per image with keys:
        - `nodeId` (str): The node to export, e.g. `1234:5678`.
        - `imageRef` (str, optional): Set for image fills; leave empty for vector renders.
        - `fileName` (str): Local file name; `.svg` renders SVG, anything else PNG.
    local_path (str): Absolute directory to save into; created when missing.
    png_scale (float, optional): PNG export scale, defaults to 2.
    svg_options (dict, optional): `outlineText`, `includeId`, `simplifyStroke` booleans.

    Returns
    -------
    (str): `Success, N images downloaded: ...` or `Failed: x of N images could not be saved: ...`.
        A partial failure is reported in the text, files already saved stay on disk.
    """
    logger.info(f"🖼️ Tool download_figma_images(file_key={file_key}, count={len(nodes)}, local_path={local_path})")
    return _unwrap(
        "download_figma_images",
        await get_toolset().download_figma_images(file_key, nodes, local_path, png_scale, svg_options),
    )


@function_tool(strict_mode=False)
async def list_figma_exports(directory: str) -> str:
    """List the Markdown exports previously saved in `directory`, with their sizes."""
    logger.info(f"📚 Tool list_figma_exports(directory={directory})")
    return _unwrap("list_figma_exports", await get_toolset().list_figma_exports(directory))


ALL_AGENT_TOOLS = [
    get_figma_data,
    download_figma_images,
    get_figma_data_to_file,
    generate_visual_description,
    generate_technical_specification,
    list_figma_exports,
]
