"""Tests for BatchRenderer."""

import pytest
import tempfile
from pathlib import Path
import numpy as np
from PIL import Image

from radialblur.codecs import Scene, SceneCodec
from radialblur.core import BlurConfig
from radialblur.generators import BatchRenderer


class TestBatchRenderer:
    @pytest.fixture
    def dirs(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            input_dir = root / "in"
            input_dir.mkdir()
            rng = np.random.default_rng(0)
            for name in ("a", "b"):
                img = rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)
                Image.fromarray(img).save(input_dir / f"{name}.png")
            yield input_dir, root / "out"

    @pytest.fixture
    def scene(self):
        return Scene(config=BlurConfig(global_max=4), randomize=3, seed=1)

    def test_render(self, dirs, scene):
        input_dir, output_dir = dirs
        renderer = BatchRenderer(scene, input_dir, output_dir)
        results = renderer.render(num_workers=1, progress=False)

        assert results["total"] == 2
        assert results["processed"] == 2
        assert results["errors"] == []
        for name in ("a", "b"):
            out = np.array(Image.open(output_dir / f"{name}.png"))
            assert out.shape == (24, 32, 3)

    def test_skip_existing(self, dirs, scene):
        input_dir, output_dir = dirs
        BatchRenderer(scene, input_dir, output_dir).render(num_workers=1, progress=False)
        results = BatchRenderer(scene, input_dir, output_dir).render(num_workers=1, progress=False)
        assert results["skipped"] == 2
        assert results["processed"] == 0

    def test_masks(self, dirs, scene):
        input_dir, output_dir = dirs
        renderer = BatchRenderer(scene, input_dir, output_dir, mask_subdir="masks")
        renderer.render(num_workers=1, progress=False)
        mask = np.array(Image.open(output_dir / "masks" / "a.png"))
        assert mask.shape == (24, 32)
        assert mask.dtype == np.uint8

    def test_bad_file_reported(self, dirs, scene):
        input_dir, output_dir = dirs
        (input_dir / "broken.png").write_text("not an image")
        results = BatchRenderer(scene, input_dir, output_dir).render(num_workers=1, progress=False)
        assert results["processed"] == 2
        assert len(results["errors"]) == 1
        assert results["errors"][0]["name"] == "broken.png"

    def test_scene_from_file(self, dirs):
        input_dir, output_dir = dirs
        scene_path = input_dir.parent / "scene.yaml"
        scene_path.write_text(SceneCodec.dumps(Scene(config=BlurConfig(global_max=2))))
        renderer = BatchRenderer(scene_path, input_dir, output_dir)
        assert renderer.scene.config.global_max == 2
        assert len(renderer.inputs) == 2
