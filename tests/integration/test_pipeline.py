"""Integration tests for pixmill pipeline processing."""

import base64

import pytest

from pixels import BLUE, RED, decode, encode_png, pixel_at, quadrant_rgba, solid_rgba
from pixmill import EncodingOptions, ImageFormat, ImageTransformer, PixelFormat, ResizeMode
from pixmill.cli import main
from pixmill.config import load_config
from pixmill.executor import shutdown_executor
from pixmill.logging_config import setup_logging
from pixmill.processor import process


@pytest.mark.integration
class TestPipelineIntegration:
    """End-to-end runs from YAML config to files on disk."""

    def test_full_config(self, write_config, full_config_dict, input_dir, temp_logo, temp_dir):
        config = load_config(write_config(full_config_dict))
        output_dir = temp_dir / "output"

        summary = process(config, input_dir, output_dir)

        assert summary.failed == 0
        assert sorted(p.name for p in output_dir.iterdir()) == [
            "pre_a_suf_thumb.jpg",
            "pre_b_suf_thumb.jpg",
        ]
        for path in summary.outputs:
            image = decode(path.read_bytes())
            assert image.format == "JPEG"
            assert image.size == (6, 6)

    def test_debug_snapshots(self, write_config, temp_png, temp_dir):
        config = load_config(write_config({
            "outputs": {
                "dbg": {
                    "debug": True,
                    "transforms": [{"scale": {"width": 10, "height": 10, "mode": "fill"}}, {"flip": "vertical"}],
                },
            },
        }))
        output_dir = temp_dir / "output"

        process(config, temp_png, output_dir)

        names = sorted(p.name for p in output_dir.iterdir())
        assert names == [
            "photo_dbg.png",
            "photo_dbg_step0_source.png",
            "photo_dbg_step1_scale_10x10_fill.png",
            "photo_dbg_step2_flipv.png",
        ]

    def test_raw_output_profile(self, write_config, temp_png, temp_dir):
        config = load_config(write_config({
            "outputs": {"raw": {"format": "bgra", "transforms": [{"crop": {"x": 0, "y": 0, "width": 2, "height": 1}}]}},
        }))
        summary = process(config, temp_png, temp_dir / "output")
        data = summary.outputs[0].read_bytes()
        # Gradient pixel (x, y) is (x, y, 0, 255) in RGBA order
        assert data == bytes((0, 0, 0, 255, 0, 0, 1, 255))

    def test_cli_end_to_end(self, write_config, input_dir, temp_dir, temp_logo):
        path = write_config({
            "settings": {"workers": 2},
            "outputs": {
                "web": {
                    "format": "webp",
                    "transforms": [
                        {"scale": {"width": 8, "height": 8, "mode": "fit"}},
                        {"overlay": {"image": "logo.png", "x": 0, "y": 0}},
                    ],
                },
            },
        })
        output_dir = temp_dir / "output"
        assert main(["-c", str(path), "-i", str(input_dir), "-o", str(output_dir), "-q"]) == 0

        web_a = decode((output_dir / "a_web.webp").read_bytes()).convert("RGBA")
        assert web_a.size == (8, 8)
        assert web_a.getpixel((0, 0)) == BLUE
        assert web_a.getpixel((7, 7)) == RED
        assert decode((output_dir / "b_web.webp").read_bytes()).size == (8, 4)

    def test_logging_with_verbosity(self, write_config, temp_png, temp_dir, capsys):
        setup_logging(verbosity=2)
        config = load_config(write_config({"outputs": {"p": {"transforms": [{"rotate": 90}]}}}))
        process(config, temp_png, temp_dir / "output")
        out = capsys.readouterr().out
        assert "Processing: photo.png" in out
        assert "[debug]" in out


@pytest.mark.integration
class TestLibraryIntegration:
    """Builder, render engine and encoder working together."""

    def teardown_method(self):
        shutdown_executor()

    def test_thumbnail_with_watermark(self):
        base = ImageTransformer.from_encoded_image(encode_png(solid_rgba(64, 32, RED), 64, 32))
        mark = ImageTransformer.from_buffer(solid_rgba(4, 4, BLUE), 4, 4, "rgba").pad(1, 1, 1, 1, "white")

        result = (
            base.scale(16, 16, ResizeMode.FILL)
            .overlay(mark, 10, 10)
            .rotate(90)
            .to_buffer_sync(PixelFormat.RGBA)
        )
        assert (result.width, result.height) == (16, 16)
        # The mark's top-left (10, 10) lands at (5, 10) after a clockwise turn
        assert pixel_at(result.buffer, 16, 5, 10) == (255, 255, 255, 255)

    def test_blocking_and_pooled_agree(self):
        t = ImageTransformer.from_buffer(quadrant_rgba(), 4, 4, "rgba").scale(9, 5, "fit").pad(1, 1, 0, 0)
        options = EncodingOptions(quality=0.6)
        assert t.to_encoded_image("jpeg", options).result(timeout=10) == t.to_encoded_image_sync("jpeg", options)

    def test_data_url_chain(self):
        url = ImageTransformer.from_buffer(quadrant_rgba(), 4, 4, "rgba").flip_horizontal().to_data_url_sync("png")
        payload = base64.b64decode(url.split(",", 1)[1])
        again = ImageTransformer.from_encoded_image(payload).flip_horizontal().to_buffer_sync()
        assert again.buffer == quadrant_rgba()

    def test_all_output_formats(self):
        t = ImageTransformer.from_buffer(quadrant_rgba(), 4, 4, "rgba")
        for fmt in ImageFormat:
            assert t.to_encoded_image_sync(fmt).width == 4
        for fmt in PixelFormat:
            assert len(t.to_buffer_sync(fmt).buffer) == 16 * fmt.bytes_per_pixel
