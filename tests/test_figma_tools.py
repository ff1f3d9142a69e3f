import os

import pytest
import yaml

from conftest import FakeFigmaService
from errors import NotFoundError, UpstreamFetchError
from figma_tools import TOOL_SPECS, FigmaTools, result_text
from models import SimplifiedDesign


def is_ok(result):
    return "isError" not in result and result["content"][0]["type"] == "text"


def is_error(result):
    return result.get("isError") is True and result["content"][0]["type"] == "text"


class TestGetFigmaData:
    @pytest.mark.asyncio
    async def test_node_fetch_returns_yaml(self, fake_service):
        result = await FigmaTools(fake_service).get_figma_data("KEY", node_id="1-1")
        assert is_ok(result)
        data = yaml.safe_load(result_text(result))
        assert data["metadata"]["name"] == "Login Flow"
        assert data["nodes"][0]["name"] == "Login Screen"
        assert fake_service.calls == [("fetch_node", "KEY", "1-1", None)]

    @pytest.mark.asyncio
    async def test_file_fetch_without_node(self, fake_service):
        await FigmaTools(fake_service).get_figma_data("KEY", depth=2)
        assert fake_service.calls == [("fetch_file", "KEY", 2)]

    @pytest.mark.asyncio
    async def test_upstream_error_becomes_error_result(self):
        service = FakeFigmaService(error=UpstreamFetchError({"message": "Access denied."}))
        result = await FigmaTools(service).get_figma_data("KEY")
        assert is_error(result)
        assert result_text(result) == "Error fetching file: Access denied."


class TestVisualDescription:
    @pytest.mark.asyncio
    async def test_describes_first_node(self, fake_service):
        result = await FigmaTools(fake_service).generate_visual_description("KEY", node_id="1:1")
        text = result_text(result)
        assert is_ok(result)
        assert "## 🏗️ Login Screen (FRAME)" in text
        assert "#ffffff" in text
        assert "Text element" in text

    @pytest.mark.asyncio
    async def test_empty_design_is_an_error(self):
        service = FakeFigmaService(design=SimplifiedDesign(name="Empty"))
        result = await FigmaTools(service).generate_visual_description("KEY")
        assert is_error(result)
        assert "No nodes found" in result_text(result)

    @pytest.mark.asyncio
    async def test_depth_limit_is_applied(self, fake_service):
        result = await FigmaTools(fake_service, max_depth=0).generate_visual_description("KEY", node_id="1:1")
        assert "Nesting limit of 0 levels reached; 2 child element(s) not described" in result_text(result)


class TestDataToFile:
    @pytest.mark.asyncio
    async def test_writes_markdown(self, fake_service, tmp_path):
        target = tmp_path / "exports" / "login"
        result = await FigmaTools(fake_service).get_figma_data_to_file("KEY", str(target), node_id="1:1")
        assert is_ok(result)
        written = tmp_path / "exports" / "login.md"
        assert written.exists()
        content = written.read_text(encoding="utf-8")
        assert content.startswith("# Login Flow\n")
        assert "- **Node ID**: 1:1" in content
        assert "```yaml\nmetadata:" in content
        assert str(written) in result_text(result)
        assert "KB" in result_text(result)

    @pytest.mark.asyncio
    async def test_fetch_error(self, tmp_path):
        service = FakeFigmaService(error=NotFoundError({"message": "Node 1:1 not found in file"}))
        result = await FigmaTools(service).get_figma_data_to_file("KEY", str(tmp_path / "x.md"), node_id="1:1")
        assert is_error(result)
        assert "Node 1:1 not found in file" in result_text(result)
        assert not (tmp_path / "x.md").exists()


class TestTechnicalSpecification:
    @pytest.mark.asyncio
    async def test_writes_document_named_after_title(self, fake_service, tmp_path):
        result = await FigmaTools(fake_service).generate_technical_specification(
            "KEY", str(tmp_path), node_id="1:1", title="Login Screen!! v2"
        )
        assert is_ok(result)
        document = (tmp_path / "login-screen-v2.md").read_text(encoding="utf-8")
        assert document.startswith("# Login Screen!! v2\n")
        assert "# 🖼️ Visual Description" in document
        assert "  - Email (TEXT)" in document
        assert "```yaml\nnodes:" in document

    @pytest.mark.asyncio
    async def test_default_title_from_node(self, fake_service, tmp_path):
        await FigmaTools(fake_service).generate_technical_specification("KEY", str(tmp_path), node_id="1:1")
        assert (tmp_path / "login-screen-technical-specification.md").exists()

    @pytest.mark.asyncio
    async def test_title_without_letters_falls_back(self, fake_service, tmp_path):
        await FigmaTools(fake_service).generate_technical_specification("KEY", str(tmp_path), node_id="1:1", title="!!!")
        assert (tmp_path / "figma-specification.md").exists()


class TestDownloadImages:
    @pytest.mark.asyncio
    async def test_success_text(self, fake_service, tmp_path):
        result = await FigmaTools(fake_service).download_figma_images("KEY", [
            {"nodeId": "1:1", "fileName": "icon.svg"},
            {"nodeId": "1:2", "imageRef": "abc", "fileName": "bg.png"},
        ], str(tmp_path))
        assert result_text(result) == "Success, 2 images downloaded: bg.png, icon.svg"

    @pytest.mark.asyncio
    async def test_partial_failure_is_not_an_error_result(self, tmp_path):
        service = FakeFigmaService(render_outcomes=[False])
        result = await FigmaTools(service).download_figma_images("KEY", [
            {"nodeId": "1:1", "fileName": "icon.svg"},
        ], str(tmp_path))
        assert is_ok(result)
        assert result_text(result) == "Failed: 1 of 1 images could not be saved: icon.svg"

    @pytest.mark.asyncio
    async def test_invalid_request_is_an_error(self, fake_service, tmp_path):
        result = await FigmaTools(fake_service).download_figma_images("KEY", [{"nodeId": "1:1"}], str(tmp_path))
        assert is_error(result)
        assert result_text(result).startswith("Error downloading images:")


class TestListExports:
    @pytest.mark.asyncio
    async def test_lists_markdown_files(self, fake_service, tmp_path):
        (tmp_path / "b.md").write_text("bbbb")
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "notes.txt").write_text("ignored")
        result = await FigmaTools(fake_service).list_figma_exports(str(tmp_path))
        text = result_text(result)
        assert "2 Figma export(s)" in text
        assert text.index("- a.md") < text.index("- b.md")
        assert "notes.txt" not in text

    @pytest.mark.asyncio
    async def test_empty_directory(self, fake_service, tmp_path):
        result = await FigmaTools(fake_service).list_figma_exports(str(tmp_path))
        assert is_ok(result)
        assert "No Figma exports found" in result_text(result)

    @pytest.mark.asyncio
    async def test_missing_directory(self, fake_service, tmp_path):
        result = await FigmaTools(fake_service).list_figma_exports(os.path.join(str(tmp_path), "missing"))
        assert is_error(result)


class TestCall:
    def test_registry_lists_all_tools(self):
        assert set(TOOL_SPECS) == {
            "get_figma_data",
            "download_figma_images",
            "get_figma_data_to_file",
            "generate_visual_description",
            "generate_technical_specification",
            "list_figma_exports",
        }

    @pytest.mark.asyncio
    async def test_dispatch_with_camel_case_arguments(self, fake_service):
        result = await FigmaTools(fake_service).call("get_figma_data", {"fileKey": "KEY", "nodeId": "1:1"})
        assert is_ok(result)
        assert fake_service.calls == [("fetch_node", "KEY", "1:1", None)]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, fake_service):
        result = await FigmaTools(fake_service).call("delete_everything", {})
        assert is_error(result)
        assert result_text(result) == "Unknown tool: delete_everything"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, fake_service):
        result = await FigmaTools(fake_service).call("download_figma_images", {"fileKey": "KEY", "nodes": [], "localPath": "/tmp", "pngScale": 0})
        assert is_error(result)
        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, fake_service):
        result = await FigmaTools(fake_service).call("get_figma_data", None)
        assert is_error(result)
        assert "Invalid arguments for get_figma_data" in result_text(result)
