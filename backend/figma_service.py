"""
Figma Service - REST Communication Layer

This module provides the communication layer between the tool server and the
Figma REST API: fetching files and nodes, resolving image fills, requesting
renders and saving downloaded assets to disk.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from errors import NotFoundError, StorageError, UpstreamFetchError
from models import FillRequest, RenderRequest, SimplifiedDesign, SvgOptions
from simplify import simplify_file_response, simplify_nodes_response

logger = logging.getLogger(__name__)

FIGMA_API_BASE = "https://api.figma.com/v1"
DEFAULT_TIMEOUT = 30.0

# User-friendly error messages for common Figma API errors
FIGMA_ERROR_MESSAGES = {
    400: "Figma rejected the request. Check the file key, node IDs and export options.",
    401: "Authentication failed. Check that your Figma API key or OAuth token is valid.",
    403: "Access denied. Check that your Figma credentials have access to this file.",
    404: "File or node not found. Check the file key and node ID.",
    429: "Figma API rate limit exceeded. Wait a moment before trying again.",
    500: "Figma server error. Try again later.",
    503: "Figma service temporarily unavailable. Try again later.",
}


class FigmaService:
    """
    Handles communication with the Figma REST API.

    This class manages:
    - Authenticated JSON requests (personal access token or OAuth bearer token)
    - Simplifying file and node responses into SimplifiedDesign objects
    - Resolving image fills and rendered exports to download URLs
    - Downloading assets concurrently and writing them to disk
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        oauth_token: Optional[str] = None,
        base_url: str = FIGMA_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the service.

        Args:
            api_key: Personal access token, sent as X-Figma-Token
            oauth_token: OAuth token, sent as a Bearer token (takes precedence)
            base_url: Base URL of the Figma REST API
            timeout: Timeout in seconds for each HTTP request (default: 30.0)
            client: Optional pre-built httpx.AsyncClient (tests inject a mock transport)
        """
        if not api_key and not oauth_token:
            raise ValueError("Either a Figma API key or an OAuth token is required")
        self.api_key = api_key
        self.oauth_token = oauth_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _auth_headers(self) -> Dict[str, str]:
        if self.oauth_token:
            return {"Authorization": f"Bearer {self.oauth_token}"}
        return {"X-Figma-Token": str(self.api_key)}

    async def _request_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a Figma API endpoint and return the parsed JSON body.

        Raises:
            UpstreamFetchError: On non-2xx responses or transport failures
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        start_time = time.time()
        logger.debug(f"🚀 GET {url} params={params}")
        try:
            response = await self.client.get(url, headers=self._auth_headers(), params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = FIGMA_ERROR_MESSAGES.get(status, f"Figma API returned status {status}")
            logger.error(f"❌ Figma API error {status} for {endpoint}: {e.response.text[:200]}")
            raise UpstreamFetchError({
                "code": "upstream_fetch_failed",
                "message": message,
                "details": {"status_code": status, "endpoint": endpoint},
            }) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Figma API request to {endpoint} failed: {e}")
            raise UpstreamFetchError({
                "code": "upstream_fetch_failed",
                "message": f"Figma API request failed: {e}",
                "details": {"endpoint": endpoint},
            }) from e

        elapsed = time.time() - start_time
        logger.info(f"✅ GET {endpoint} completed in {elapsed:.3f}s")
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFetchError({
                "code": "upstream_fetch_failed",
                "message": f"Figma API returned invalid JSON for {endpoint}",
                "details": {"endpoint": endpoint},
            }) from e

    # ============================================
    # ============== DESIGN DATA =================
    # ============================================

    async def fetch_file(self, file_key: str, depth: Optional[int] = None) -> SimplifiedDesign:
        """Fetch a whole file (optionally limited to `depth` levels) and simplify it."""
        params = {"depth": depth} if depth else None
        logger.info(f"📥 Fetching file {file_key} ({f'{depth} layers deep' if depth else 'all layers'})")
        payload = await self._request_json(f"files/{file_key}", params=params)
        return simplify_file_response(payload)

    async def fetch_node(self, file_key: str, node_id: str, depth: Optional[int] = None) -> SimplifiedDesign:
        """Fetch a single node subtree of a file and simplify it."""
        node_id = normalize_node_id(node_id)
        params: Dict[str, Any] = {"ids": node_id}
        if depth:
            params["depth"] = depth
        logger.info(f"📥 Fetching node {node_id} from file {file_key}")
        payload = await self._request_json(f"files/{file_key}/nodes", params=params)
        return simplify_nodes_response(payload, [node_id])

    # ============================================
    # ================ IMAGES ====================
    # ============================================

    async def fetch_image_fills(
        self, file_key: str, requests: Sequence[FillRequest], directory: str
    ) -> List[bool]:
        """
        Download images referenced by image fills.

        Returns:
            One boolean per request, in request order; True when the file was saved.
        """
        if not requests:
            return []
        payload = await self._request_json(f"files/{file_key}/images")
        urls: Dict[str, Optional[str]] = (payload.get("meta") or {}).get("images") or {}
        return await asyncio.gather(*[
            self._download(urls.get(request.image_ref), directory, request.file_name)
            for request in requests
        ])

    async def fetch_rendered_images(
        self,
        file_key: str,
        requests: Sequence[RenderRequest],
        directory: str,
        png_scale: float = 2,
        svg_options: Optional[SvgOptions] = None,
    ) -> List[bool]:
        """
        Render nodes as PNG or SVG and download the results.

        PNG and SVG requests are sent as two separate render calls; the scale only
        applies to PNGs and the SVG options only to SVGs.

        Returns:
            One boolean per request, in request order; True when the file was saved.
        """
        if not requests:
            return []
        svg_options = svg_options or SvgOptions()

        # One URL map per format; the same node may be requested as both png and svg
        urls: Dict[str, Dict[str, Optional[str]]] = {"png": {}, "svg": {}}
        png_ids = _unique(r.node_id for r in requests if r.file_type == "png")
        svg_ids = _unique(r.node_id for r in requests if r.file_type == "svg")
        render_calls = []
        if png_ids:
            render_calls.append(self._render_urls(file_key, {
                "ids": ",".join(png_ids), "format": "png", "scale": png_scale,
            }))
        if svg_ids:
            render_calls.append(self._render_urls(file_key, {
                "ids": ",".join(svg_ids),
                "format": "svg",
                "svg_outline_text": _flag(svg_options.outline_text),
                "svg_include_id": _flag(svg_options.include_id),
                "svg_simplify_stroke": _flag(svg_options.simplify_stroke),
            }))
        formats = [fmt for fmt, ids in (("png", png_ids), ("svg", svg_ids)) if ids]
        for fmt, rendered in zip(formats, await asyncio.gather(*render_calls)):
            urls[fmt].update(rendered)

        return await asyncio.gather(*[
            self._download(urls[request.file_type].get(request.node_id), directory, request.file_name)
            for request in requests
        ])

    async def _render_urls(self, file_key: str, params: Dict[str, Any]) -> Dict[str, Optional[str]]:
        payload = await self._request_json(f"images/{file_key}", params=params)
        if payload.get("err"):
            raise UpstreamFetchError({
                "code": "upstream_fetch_failed",
                "message": f"Figma could not render images: {payload['err']}",
                "details": {"params": params},
            })
        return payload.get("images") or {}

    async def _download(self, url: Optional[str], directory: str, file_name: str) -> bool:
        """Download one asset. Network failures return False; write failures raise StorageError."""
        if not url:
            logger.warning(f"⚠️ No download URL for {file_name}")
            return False
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"❌ Download of {file_name} failed: {e}")
            return False

        destination = Path(directory) / file_name
        try:
            await asyncio.to_thread(_write_bytes, destination, response.content)
        except OSError as e:
            raise StorageError({
                "code": "storage_error",
                "message": f"Failed to write {destination}: {e}",
                "details": {"path": str(destination)},
            }) from e
        logger.info(f"💾 Saved {destination} ({len(response.content)} bytes)")
        return True


def _write_bytes(destination: Path, content: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(content)


def _unique(ids: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(ids))


def _flag(value: bool) -> str:
    return "true" if value else "false"


def normalize_node_id(node_id: str) -> str:
    """Node IDs copied from URLs use `1-2`; the API expects `1:2`."""
    if "-" in node_id:
        return node_id.replace("-", ":", 1)
    return node_id


def require_nodes(design: SimplifiedDesign) -> SimplifiedDesign:
    if not design.nodes:
        raise NotFoundError({"code": "not_found", "message": f"No nodes found in {design.name}"})
    return design
