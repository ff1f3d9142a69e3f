"""
Figma Tools - Design context tools for assistants

This module defines the tools exposed to assistants. Each tool fetches design
data through the FigmaService, runs the descriptor/export/assembly logic and
returns a protocol result of exactly one of two shapes:

    success: {"content": [{"type": "text", "text": str}]}
    failure: {"isError": True, "content": [{"type": "text", "text": str}]}

No exception escapes a tool; both transport bindings (MCP server and agent
tools) call into FigmaTools.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, ValidationError

from descriptor import DEFAULT_MAX_DEPTH, DescriptorEngine
from document import (
    assemble_document,
    ensure_markdown_path,
    render_data_document,
    sanitize_file_name,
    write_document,
)
from errors import error_message
from export import export_assets
from figma_service import FigmaService, require_nodes
from models import ExportRequest, FigmaModel, SimplifiedDesign, SvgOptions
from outline import render_outline
from simplify import dump_yaml, serialize_design, simplify_nodes

logger = logging.getLogger(__name__)

ToolResult = Dict[str, Any]


# ============================================
# ============ INTERNAL HELPERS ==============
# ============================================

def _ok(text: str) -> ToolResult:
    return {"content": [{"type": "text", "text": text}]}


def _error(text: str) -> ToolResult:
    return {"isError": True, "content": [{"type": "text", "text": text}]}


def result_text(result: ToolResult) -> str:
    """Concatenate the text parts of a tool result."""
    return "\n".join(part.get("text", "") for part in result.get("content", []) if part.get("type") == "text")


def _fetch_description(node_id: Optional[str], depth: Optional[int], file_key: str) -> str:
    return (
        f"Fetching {f'{depth} layers deep' if depth else 'all layers'} of "
        f"{f'node {node_id} from file' if node_id else 'full file'} {file_key}"
    )


# ============================================
# ======= ARGUMENT MODELS (TOOL INPUTS) ======
# ============================================

class FigmaDataArgs(FigmaModel):
    file_key: str = Field(
        description="The key of the Figma file to fetch, often found in a provided URL like figma.com/(file|design)/<fileKey>/...",
    )
    node_id: Optional[str] = Field(
        default=None,
        description="The ID of the node to fetch, often found as URL parameter node-id=<nodeId>, always use if provided",
    )
    depth: Optional[int] = Field(
        default=None,
        ge=1,
        description="OPTIONAL. Do NOT use unless explicitly requested by the user. Controls how many levels deep to traverse the node tree.",
    )


class DownloadImagesArgs(FigmaModel):
    file_key: str = Field(description="The key of the Figma file containing the node")
    nodes: List[ExportRequest] = Field(description="The nodes to fetch as images")
    local_path: str = Field(
        description=(
            "The absolute path to the directory where images are stored in the project. "
            "If the directory does not exist, it will be created."
        ),
    )
    png_scale: float = Field(
        default=2,
        gt=0,
        description="Export scale for PNG images. Optional, defaults to 2. Affects PNG images only.",
    )
    svg_options: SvgOptions = Field(default_factory=SvgOptions, description="Options for SVG export")


class DataToFileArgs(FigmaDataArgs):
    file_path: str = Field(
        description="Complete path where the file should be saved, including filename and .md extension",
    )


class TechnicalSpecArgs(FigmaDataArgs):
    output_directory: str = Field(description="Directory where the specification document is written")
    title: Optional[str] = Field(
        default=None,
        description="Document title; also used (sanitized) as the file name. Defaults to the node name.",
    )


class ListExportsArgs(FigmaModel):
    directory: str = Field(description="Directory containing previously exported .md files")


# ============================================
# ===============  TOOLS  ====================
# ============================================

class FigmaTools:
    """The design-context toolset, bound to one FigmaService."""

    def __init__(self, service: FigmaService, max_depth: int = DEFAULT_MAX_DEPTH):
        self.service = service
        self.engine = DescriptorEngine(max_depth=max_depth)

    async def _fetch(self, file_key: str, node_id: Optional[str], depth: Optional[int]) -> SimplifiedDesign:
        logger.info(f"📥 {_fetch_description(node_id, depth, file_key)}")
        if node_id:
            design = await self.service.fetch_node(file_key, node_id, depth)
        else:
            design = await self.service.fetch_file(file_key, depth)
        logger.info(f"✅ Successfully fetched file: {design.name}")
        return design

    # ============================================
    # === Category 1: Design data ================
    # ============================================

    async def get_figma_data(self, file_key: str, node_id: Optional[str] = None, depth: Optional[int] = None) -> ToolResult:
        """Return the simplified design (metadata, nodes, globalVars) as YAML."""
        try:
            design = await self._fetch(file_key, node_id, depth)
            logger.info("🧾 Generating YAML result from file")
            return _ok(dump_yaml(serialize_design(design)))
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error fetching file {file_key}: {message}")
            return _error(f"Error fetching file: {message}")

    async def get_figma_data_to_file(
        self,
        file_key: str,
        file_path: str,
        node_id: Optional[str] = None,
        depth: Optional[int] = None,
    ) -> ToolResult:
        """Fetch design data and save it as a Markdown file with a YAML block."""
        try:
            design = await self._fetch(file_key, node_id, depth)
            output_path = ensure_markdown_path(file_path)
            content = render_data_document(
                file_name=design.name,
                file_key=file_key,
                yaml_text=dump_yaml(serialize_design(design)),
                node_id=node_id,
                depth=depth,
                last_modified=design.last_modified,
            )
            size = write_document(output_path, content)
            return _ok(
                "✅ Figma data saved successfully\n\n"
                f"📁 File: {output_path}\n"
                f"📝 Size: {size / 1024:.2f} KB\n\n"
                "The file has been saved to the specified location."
            )
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error processing Figma file {file_key}: {message}")
            return _error(f"❌ Error saving Figma data: {message}")

    # ============================================
    # === Category 2: Description & specs ========
    # ============================================

    async def generate_visual_description(
        self, file_key: str, node_id: Optional[str] = None, depth: Optional[int] = None
    ) -> ToolResult:
        """Describe the fetched node (or the first page of the file) in detail."""
        try:
            design = require_nodes(await self._fetch(file_key, node_id, depth))
            return _ok(self.engine.describe(design.nodes[0], design.file_context))
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error describing file {file_key}: {message}")
            return _error(f"Error generating visual description: {message}")

    async def generate_technical_specification(
        self,
        file_key: str,
        output_directory: str,
        node_id: Optional[str] = None,
        depth: Optional[int] = None,
        title: Optional[str] = None,
    ) -> ToolResult:
        """Write a combined specification (description + outline + raw data) to disk."""
        try:
            design = require_nodes(await self._fetch(file_key, node_id, depth))
            root = design.nodes[0]
            context = design.file_context
            heading = title or f"{root.label} - Technical Specification"

            raw_nodes, registry = simplify_nodes([root])
            raw_tree = dump_yaml({"nodes": raw_nodes, "globalVars": {"styles": registry.styles}})
            document = assemble_document(
                node=root,
                file_context=context,
                descriptor_text=self.engine.describe(root, context),
                outline_text=render_outline(root),
                raw_serialized_tree=raw_tree,
                file_key=file_key,
                node_id=node_id,
                title=heading,
            )
            file_name = sanitize_file_name(heading) or "figma-specification"
            output_path = Path(output_directory) / f"{file_name}.md"
            size = write_document(output_path, document)
            return _ok(
                "✅ Technical specification generated\n\n"
                f"📁 File: {output_path}\n"
                f"📝 Size: {size / 1024:.2f} KB\n"
                f"🧩 Root: {root.label} ({root.type})"
            )
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error generating specification for {file_key}: {message}")
            return _error(f"❌ Error generating technical specification: {message}")

    # ============================================
    # === Category 3: Assets & exports ===========
    # ============================================

    async def download_figma_images(
        self,
        file_key: str,
        nodes: List[Any],
        local_path: str,
        png_scale: float = 2,
        svg_options: Optional[Any] = None,
    ) -> ToolResult:
        """Download image fills and rendered PNG/SVG exports into `local_path`."""
        try:
            requests = [ExportRequest.model_validate(node) for node in nodes]
            options = SvgOptions.model_validate(svg_options) if svg_options is not None else SvgOptions()
            result = await export_assets(self.service, file_key, requests, local_path, png_scale, options)
            return _ok(result.summary())
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error downloading images from file {file_key}: {message}")
            return _error(f"Error downloading images: {message}")

    async def list_figma_exports(self, directory: str) -> ToolResult:
        """List the Markdown exports previously written to `directory`."""
        try:
            folder = Path(directory)
            if not folder.is_dir():
                return _error(f"Directory not found: {directory}")
            exports = sorted(p for p in folder.glob("*.md") if p.is_file())
            if not exports:
                return _ok(f"No Figma exports found in {directory}")
            lines = [f"📚 {len(exports)} Figma export(s) in {directory}:", ""]
            for path in exports:
                stat = path.stat()
                modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
                lines.append(f"- {path.name} ({stat.st_size / 1024:.2f} KB, modified {modified})")
            return _ok("\n".join(lines))
        except Exception as e:
            message = error_message(e)
            logger.error(f"❌ Error listing exports in {directory}: {message}")
            return _error(f"Error listing exports: {message}")

    # ============================================
    # ============ DISPATCH ======================
    # ============================================

    async def call(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
        """Validate raw arguments for tool `name` and run it."""
        spec = TOOL_SPECS.get(name)
        if spec is None:
            return _error(f"Unknown tool: {name}")
        _, args_model, runner = spec
        try:
            args = args_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.error(f"❌ Invalid arguments for {name}: {e}")
            return _error(f"Invalid arguments for {name}: {e}")
        return await runner(self, args)


# ============================================
# ============ TOOL REGISTRY =================
# ============================================

Runner = Callable[[FigmaTools, Any], Awaitable[ToolResult]]


def _run_get_figma_data(tools: FigmaTools, args: FigmaDataArgs) -> Awaitable[ToolResult]:
    return tools.get_figma_data(args.file_key, args.node_id, args.depth)


def _run_download(tools: FigmaTools, args: DownloadImagesArgs) -> Awaitable[ToolResult]:
    return tools.download_figma_images(args.file_key, list(args.nodes), args.local_path, args.png_scale, args.svg_options)


def _run_data_to_file(tools: FigmaTools, args: DataToFileArgs) -> Awaitable[ToolResult]:
    return tools.get_figma_data_to_file(args.file_key, args.file_path, args.node_id, args.depth)


def _run_visual_description(tools: FigmaTools, args: FigmaDataArgs) -> Awaitable[ToolResult]:
    return tools.generate_visual_description(args.file_key, args.node_id, args.depth)


def _run_technical_spec(tools: FigmaTools, args: TechnicalSpecArgs) -> Awaitable[ToolResult]:
    return tools.generate_technical_specification(args.file_key, args.output_directory, args.node_id, args.depth, args.title)


def _run_list_exports(tools: FigmaTools, args: ListExportsArgs) -> Awaitable[ToolResult]:
    return tools.list_figma_exports(args.directory)


TOOL_SPECS: Dict[str, Tuple[str, Type[BaseModel], Runner]] = {
    "get_figma_data": (
        "When the nodeId cannot be obtained, obtain the layout information about the entire Figma file",
        FigmaDataArgs,
        _run_get_figma_data,
    ),
    "download_figma_images": (
        "Download SVG and PNG images used in a Figma file based on the IDs of image or icon nodes",
        DownloadImagesArgs,
        _run_download,
    ),
    "get_figma_data_to_file": (
        "Get Figma data and save it to a .md file at the specified path",
        DataToFileArgs,
        _run_data_to_file,
    ),
    "generate_visual_description": (
        "Generate a detailed visual description (geometry, colors, typography, borders, effects) of a Figma node",
        FigmaDataArgs,
        _run_visual_description,
    ),
    "generate_technical_specification": (
        "Combine the visual description, a structure outline and the raw design data into one specification document",
        TechnicalSpecArgs,
        _run_technical_spec,
    ),
    "list_figma_exports": (
        "List Figma Markdown exports previously saved in a directory",
        ListExportsArgs,
        _run_list_exports,
    ),
}
