"""
Asset Export - Concurrent image downloads

Splits export requests into image-fill downloads (the node has an imageRef)
and render downloads (fresh PNG/SVG exports), runs both pathways at the same
time and merges the per-item outcomes: fills first, then renders, each in
request order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from errors import StorageError
from figma_service import normalize_node_id
from models import ExportRequest, FillRequest, RenderRequest, SvgOptions

logger = logging.getLogger(__name__)


class AssetFetcher(Protocol):
    async def fetch_image_fills(
        self, file_key: str, requests: Sequence[FillRequest], directory: str
    ) -> List[bool]: ...

    async def fetch_rendered_images(
        self,
        file_key: str,
        requests: Sequence[RenderRequest],
        directory: str,
        png_scale: float = 2,
        svg_options: Optional[SvgOptions] = None,
    ) -> List[bool]: ...


@dataclass(frozen=True)
class ExportItemResult:
    file_name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class ExportResult:
    """Per-item outcomes of one export batch, fills first then renders."""

    items: List[ExportItemResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(item.ok for item in self.items)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def saved_files(self) -> List[str]:
        return [item.file_name for item in self.items if item.ok]

    @property
    def failed_files(self) -> List[str]:
        return [item.file_name for item in self.items if not item.ok]

    def summary(self) -> str:
        if self.success:
            return f"Success, {self.count} images downloaded: {', '.join(item.file_name for item in self.items)}"
        failed = self.failed_files
        return (
            f"Failed: {len(failed)} of {self.count} images could not be saved: {', '.join(failed)}"
        )


def partition_requests(requests: Sequence[ExportRequest]) -> Tuple[List[FillRequest], List[RenderRequest]]:
    """Split requests by the presence of an imageRef."""
    fills: List[FillRequest] = []
    renders: List[RenderRequest] = []
    for request in requests:
        if request.image_ref:
            fills.append(FillRequest(
                node_id=request.node_id,
                image_ref=request.image_ref,
                file_name=request.file_name,
            ))
        else:
            renders.append(RenderRequest(
                node_id=normalize_node_id(request.node_id),
                file_name=request.file_name,
                file_type=request.file_type,
            ))
    return fills, renders


def ensure_directory(path: str) -> Path:
    """Create `path` (and parents) if needed; an existing directory is fine."""
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError({
            "code": "storage_error",
            "message": f"Failed to create directory {directory}: {e}",
            "details": {"path": str(directory)},
        }) from e
    return directory


def _align(outcomes: Sequence[bool], expected: int) -> List[bool]:
    # Missing outcomes count as failures, extra ones are ignored
    aligned = [bool(o) for o in list(outcomes)[:expected]]
    return aligned + [False] * (expected - len(aligned))


async def _no_downloads() -> List[bool]:
    return []


async def export_assets(
    service: AssetFetcher,
    file_key: str,
    requests: Sequence[ExportRequest],
    target_directory: str,
    png_scale: float = 2,
    svg_options: Optional[SvgOptions] = None,
) -> ExportResult:
    """
    Download every requested asset into `target_directory`.

    Both pathways run concurrently. Files already written stay in place when
    another item fails; exceptions raised by the service propagate unchanged.
    """
    if png_scale <= 0:
        raise ValueError("png_scale must be positive")
    svg_options = svg_options or SvgOptions()
    fill_requests, render_requests = partition_requests(requests)
    logger.info(
        f"🖼️ Exporting {len(requests)} asset(s) from {file_key}: "
        f"{len(fill_requests)} fill(s), {len(render_requests)} render(s)"
    )

    directory = str(ensure_directory(target_directory))
    fill_downloads = (
        service.fetch_image_fills(file_key, fill_requests, directory)
        if fill_requests else _no_downloads()
    )
    render_downloads = (
        service.fetch_rendered_images(file_key, render_requests, directory, png_scale, svg_options)
        if render_requests else _no_downloads()
    )
    fill_outcomes, render_outcomes = await asyncio.gather(fill_downloads, render_downloads)

    items: List[ExportItemResult] = []
    for request, ok in zip(fill_requests, _align(fill_outcomes, len(fill_requests))):
        items.append(ExportItemResult(request.file_name, ok, None if ok else f"image fill {request.image_ref} was not saved"))
    for request, ok in zip(render_requests, _align(render_outcomes, len(render_requests))):
        items.append(ExportItemResult(request.file_name, ok, None if ok else f"render of node {request.node_id} was not saved"))

    result = ExportResult(items=items)
    if result.success:
        logger.info(f"✅ Exported {result.count} asset(s) to {directory}")
    else:
        logger.warning(f"⚠️ {len(result.failed_files)} of {result.count} asset(s) failed: {', '.join(result.failed_files)}")
    return result
