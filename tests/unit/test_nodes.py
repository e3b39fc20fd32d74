"""
Tests for the built-in node types.
"""

import pytest
from PIL import Image

from genflow.core.data_types import DataType, MediaFile, MediaKind
from genflow.core.dataflow import execute_node
from genflow.core.graph import GenerationState, NodeGraph
from genflow.core.node_types import NodeRegistry
from genflow.nodes.generation.common import ratio_to_size
from genflow.nodes.generation.image_edit import image_edit_params
from genflow.nodes.generation.image_to_video import midjourney_video_params
from genflow.nodes.generation.text_to_image import flux_fal_params, flux_wavespeed_params
from genflow.nodes.input.upload import load_upload


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (8, 4), color=(200, 40, 40)).save(path)
    return path


def create(type_id):
    return NodeRegistry.instance().create_node(type_id)


class TestDataType:
    """Tests for DataType."""

    def test_compatibility(self):
        assert DataType.STRING.is_compatible_with(DataType.STRING)
        assert DataType.ANY.is_compatible_with(DataType.OBJECT)
        assert not DataType.OBJECT.is_compatible_with(DataType.STRING)

    def test_parse_unknown(self):
        assert DataType.parse("IMAGE") is DataType.ANY
        assert DataType.parse("object") is DataType.OBJECT


class TestRatioToSize:
    """Tests for ratio_to_size()."""

    @pytest.mark.parametrize("ratio, expected", [
        ("1:1", (1024, 1024)),
        ("16:9", (1024, 576)),
        ("9:16", (576, 1024)),
        ("4:3", (1024, 768)),
        ("21:9", (1024, 440)),
        ("3:2", (1024, 680)),
    ])
    def test_ratios(self, ratio, expected):
        assert ratio_to_size(ratio) == expected

    @pytest.mark.parametrize("ratio", ["", "wide", "0:1", "16-9", None])
    def test_invalid_ratio_is_square(self, ratio):
        assert ratio_to_size(ratio) == (1024, 1024)

    def test_max_dim(self):
        assert ratio_to_size("16:9", max_dim=512) == (512, 288)


class TestParamBuilders:
    """Tests for the generator parameter builders."""

    def test_flux_wavespeed(self):
        params = flux_wavespeed_params(
            {"prompt": "a cat"},
            {"ratio": "16:9", "seed": -1, "output_format": "png"},
        )
        assert params["prompt"] == "a cat"
        assert params["size"] == "1024*576"
        assert params["output_format"] == "png"

    def test_flux_fal(self):
        params = flux_fal_params({"prompt": "a cat"}, {"ratio": "9:16", "seed": 3})
        assert params["image_size"] == "portrait_16_9"
        assert params["seed"] == 3

    def test_flux_fal_unset_seed(self):
        params = flux_fal_params({"prompt": "a cat"}, {"ratio": "5:4", "seed": -1})
        assert params["image_size"] == "square_hd"
        assert "seed" not in params

    def test_image_edit_sends_image(self):
        params = image_edit_params(
            {"prompt": "make it blue", "image_url": "https://x/a.png"},
            {"num_images": 1, "seed": -1, "output_format": "jpeg"},
        )
        assert params["image"] == "https://x/a.png"
        assert "strength" not in params

    def test_midjourney_optional_knobs(self):
        params = midjourney_video_params(
            {"image": "https://x/a.png", "prompt": "slow pan"},
            {"stylize": 0, "chaos": 5, "weird": None, "seed": -1},
        )
        assert params["chaos"] == 5
        assert "stylize" not in params
        assert "weird" not in params
        assert "seed" not in params
        assert params["resolution"] == "480p"
        assert params["quality"] == 1


class TestMediaFile:
    """Tests for MediaFile."""

    def test_image(self, png_file):
        media = MediaFile.from_file(png_file, MediaKind.IMAGE)
        assert media.mime_type == "image/png"
        assert media.size == (8, 4)
        assert media.data_url.startswith("data:image/png;base64,")

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "fake.png"
        path.write_text("definitely not a png")
        with pytest.raises(ValueError):
            MediaFile.from_file(path, MediaKind.IMAGE)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MediaFile.from_file(tmp_path / "nope.png", MediaKind.IMAGE)

    def test_model_3d(self, tmp_path):
        path = tmp_path / "chair.glb"
        path.write_bytes(b"glTF")
        media = MediaFile.from_file(path, MediaKind.MODEL_3D)
        assert media.mime_type == "model/gltf-binary"
        assert media.size is None

    def test_unsupported_model_format(self, tmp_path):
        path = tmp_path / "chair.stl"
        path.write_bytes(b"solid")
        with pytest.raises(ValueError):
            MediaFile.from_file(path, MediaKind.MODEL_3D)

    def test_video_rejects_other_files(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ValueError):
            MediaFile.from_file(path, MediaKind.VIDEO)


class TestInputNodes:
    """Tests for prompt and upload nodes."""

    @pytest.mark.asyncio
    async def test_prompt_commits_widget_value(self):
        graph = NodeGraph()
        prompt = graph.add_node(create("ai-tools/text/prompt"))
        prompt.set_widget_value("prompt", "a castle")

        outputs = await execute_node(graph, prompt)

        assert outputs == {"prompt": "a castle"}
        assert prompt.properties["prompt"] == "a castle"
        assert prompt.get_output_data(0) == "a castle"

    def test_load_upload(self, png_file):
        node = create("ai-tools/image/upload_image")
        media = load_upload(node, png_file, MediaKind.IMAGE)

        assert node.properties["file_path"] == str(png_file)
        assert node.display_value == media.data_url
        assert node.get_output_data(0) == media.data_url

    @pytest.mark.asyncio
    async def test_upload_executor_reads_file_path(self, png_file):
        graph = NodeGraph()
        node = graph.add_node(create("ai-tools/image/upload_image"))
        node.set_property("file_path", str(png_file))

        outputs = await execute_node(graph, node)

        assert outputs["image_url"].startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_upload_without_file(self):
        graph = NodeGraph()
        node = graph.add_node(create("ai-tools/video/upload_video"))
        assert await execute_node(graph, node) == {"video_url": None}


class TestOutputNodes:
    """Tests for preview and JSON data nodes."""

    @pytest.mark.asyncio
    async def test_preview_passes_through(self):
        graph = NodeGraph()
        upload = graph.add_node(create("ai-tools/image/upload_image"))
        preview = graph.add_node(create("ai-tools/image/image_preview"))
        second = graph.add_node(create("ai-tools/image/image_preview"))
        graph.connect(upload.id, 0, preview.id, 0)
        graph.connect(preview.id, 0, second.id, 0)
        upload.set_output_data(0, "https://x/a.png")

        await execute_node(graph, preview)
        await execute_node(graph, second)

        assert preview.display_value == "https://x/a.png"
        assert second.display_value == "https://x/a.png"

    @pytest.mark.asyncio
    async def test_preview_keeps_value_without_input(self):
        graph = NodeGraph()
        preview = graph.add_node(create("ai-tools/video/video_preview"))
        preview.display_value = "https://x/v.mp4"

        await execute_node(graph, preview)

        assert preview.display_value == "https://x/v.mp4"

    @pytest.mark.asyncio
    async def test_json_data_shows_generator_data(self):
        graph = NodeGraph()
        generator = graph.add_node(
            create("ai-providers/image-upscaler/image-upscaler_wavespeed")
        )
        viewer = graph.add_node(create("ai-tools/text/json_data"))
        assert graph.connect(generator.id, generator.find_output_slot("data"), viewer.id, 0)

        generator.generation = GenerationState(
            request_payload={"image": "https://x/a.png"},
            response_payload={"status": "completed"},
        )
        await execute_node(graph, generator)
        await execute_node(graph, viewer)

        assert viewer.display_value == {
            "request": {"image": "https://x/a.png"},
            "response": {"status": "completed"},
        }
