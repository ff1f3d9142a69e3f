"""Shared test fixtures."""

import copy
from typing import Any, Dict, List, Optional, Sequence

import pytest

from models import SimplifiedDesign, parse_node
from simplify import simplify_file_response, simplify_nodes_response

WHITE = {"r": 1, "g": 1, "b": 1, "a": 1}
BLUE = {"r": 0.0, "g": 0.4, "b": 1.0, "a": 1}


LOGIN_SCREEN = {
    "id": "1:1",
    "name": "Login Screen",
    "type": "FRAME",
    "absoluteBoundingBox": {"x": 0, "y": 0, "width": 375, "height": 812},
    "fills": [{"type": "SOLID", "color": WHITE}],
    "layoutMode": "VERTICAL",
    "paddingTop": 24,
    "paddingRight": 16,
    "paddingBottom": 24,
    "paddingLeft": 16,
    "itemSpacing": 12,
    "children": [
        {
            "id": "1:2",
            "name": "Email",
            "type": "TEXT",
            "characters": "Email",
            "absoluteBoundingBox": {"x": 16, "y": 24, "width": 343, "height": 20},
            "style": {"fontFamily": "Inter", "fontSize": 14.0, "fontWeight": 500},
        },
        {
            "id": "1:3",
            "name": "Submit Button",
            "type": "RECTANGLE",
            "absoluteBoundingBox": {"x": 16, "y": 56, "width": 343, "height": 48},
            "fills": [{"type": "SOLID", "color": BLUE}],
            "strokes": [{"type": "SOLID", "color": WHITE}],
            "strokeWeight": 2,
            "cornerRadius": 8,
            "effects": [
                {
                    "type": "DROP_SHADOW",
                    "color": {"r": 0, "g": 0, "b": 0, "a": 0.25},
                    "offset": {"x": 0, "y": 4},
                    "radius": 8,
                }
            ],
        },
    ],
}


def make_file_payload(*frames: Dict[str, Any], name: str = "Login Flow") -> Dict[str, Any]:
    return {
        "name": name,
        "lastModified": "2024-05-01T10:00:00Z",
        "thumbnailUrl": "https://example.com/thumb.png",
        "document": {
            "id": "0:0",
            "name": "Document",
            "type": "DOCUMENT",
            "children": [
                {"id": "0:1", "name": "Page 1", "type": "CANVAS", "children": [copy.deepcopy(f) for f in frames]},
            ],
        },
    }


def make_nodes_payload(node: Dict[str, Any], name: str = "Login Flow") -> Dict[str, Any]:
    return {
        "name": name,
        "lastModified": "2024-05-01T10:00:00Z",
        "nodes": {node["id"]: {"document": copy.deepcopy(node)}},
    }


def chain(depth: int) -> Dict[str, Any]:
    """A FRAME nested `depth` levels deep (depth + 1 nodes in total)."""
    node: Dict[str, Any] = {"id": f"9:{depth}", "name": f"Level {depth}", "type": "FRAME"}
    for level in range(depth - 1, -1, -1):
        node = {"id": f"9:{level}", "name": f"Level {level}", "type": "FRAME", "children": [node]}
    return node


class FakeFigmaService:
    """In-memory stand-in for FigmaService recording every call."""

    def __init__(
        self,
        design: Optional[SimplifiedDesign] = None,
        fill_outcomes: Optional[List[bool]] = None,
        render_outcomes: Optional[List[bool]] = None,
        error: Optional[Exception] = None,
    ):
        self.design = design
        self.fill_outcomes = fill_outcomes
        self.render_outcomes = render_outcomes
        self.error = error
        self.calls: List[tuple] = []

    async def fetch_file(self, file_key: str, depth: Optional[int] = None) -> SimplifiedDesign:
        self.calls.append(("fetch_file", file_key, depth))
        if self.error:
            raise self.error
        return self.design

    async def fetch_node(self, file_key: str, node_id: str, depth: Optional[int] = None) -> SimplifiedDesign:
        self.calls.append(("fetch_node", file_key, node_id, depth))
        if self.error:
            raise self.error
        return self.design

    async def fetch_image_fills(self, file_key: str, requests: Sequence[Any], directory: str) -> List[bool]:
        self.calls.append(("fetch_image_fills", file_key, list(requests), directory))
        if self.error:
            raise self.error
        return list(self.fill_outcomes) if self.fill_outcomes is not None else [True] * len(requests)

    async def fetch_rendered_images(
        self, file_key: str, requests: Sequence[Any], directory: str, png_scale: float = 2, svg_options: Any = None
    ) -> List[bool]:
        self.calls.append(("fetch_rendered_images", file_key, list(requests), directory, png_scale, svg_options))
        if self.error:
            raise self.error
        return list(self.render_outcomes) if self.render_outcomes is not None else [True] * len(requests)

    def calls_to(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method]


@pytest.fixture
def login_node():
    return parse_node(copy.deepcopy(LOGIN_SCREEN))


@pytest.fixture
def login_design() -> SimplifiedDesign:
    return simplify_nodes_response(make_nodes_payload(LOGIN_SCREEN), ["1:1"])


@pytest.fixture
def file_design() -> SimplifiedDesign:
    return simplify_file_response(make_file_payload(LOGIN_SCREEN))


@pytest.fixture
def fake_service(login_design) -> FakeFigmaService:
    return FakeFigmaService(design=login_design)
