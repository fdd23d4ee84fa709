"""Batch Renderer: apply one scene to every image in a directory."""

import logging
import numpy as np
from PIL import Image
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from concurrent.futures import ProcessPoolExecutor, as_completed
from tqdm import tqdm
import traceback

from ..core import RadialBlurEngine, mask_to_image
from ..codecs import SceneCodec, Scene

logger = logging.getLogger(__name__)


def load_image(path: Path) -> np.ndarray:
    """Load image as uint8 [H, W, C], keeping alpha when present."""
    img = Image.open(path)
    has_alpha = "A" in img.getbands() or (img.mode == "P" and "transparency" in img.info)
    mode = "RGBA" if has_alpha else "RGB"
    return np.array(img.convert(mode), dtype=np.uint8)


def save_image(path: Path, img: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(img).save(path)


def _render_file(
    input_path: Path,
    output_path: Path,
    mask_path: Optional[Path],
    scene_dict: Dict[str, Any],
    index: int,
) -> Dict[str, Any]:
    """Render a single image (worker function)."""
    try:
        scene = SceneCodec.decode(scene_dict)
        image = load_image(input_path)
        H, W = image.shape[:2]

        points = scene.build_point_set(W, H, index=index)
        engine = RadialBlurEngine(scene.config)
        output, meta = engine.render(image, points)

        save_image(output_path, output)
        if mask_path is not None:
            save_image(mask_path, mask_to_image(meta["mask"]))

        if meta["status"] != "success":
            return {"name": input_path.name, "status": "error", "error": meta["error"],
                    "traceback": meta.get("traceback", "")}
        return {"name": input_path.name, "status": "success", "num_points": meta["num_points"]}

    except Exception as e:
        return {
            "name": input_path.name,
            "status": "error",
            "error": str(e),
            "traceback": traceback.format_exc(),
        }


class BatchRenderer:
    """Render a directory of images with a shared scene.

    Output files keep the input file names; masks, when requested, are
    written as greyscale PNGs under ``mask_subdir``.
    """

    def __init__(
        self,
        scene: Union[Scene, str, Path],
        input_root: Path,
        output_root: Path,
        pattern: str = "*.png",
        mask_subdir: Optional[str] = None,
    ):
        """Initialize renderer.

        Args:
            scene: Scene or path to a YAML scene file
            input_root: directory holding input images
            output_root: directory for rendered images
            pattern: glob pattern selecting input images
            mask_subdir: subdirectory of ``output_root`` for masks (None: skip)
        """
        self.scene = scene if isinstance(scene, Scene) else SceneCodec.load(scene)
        self.input_root = Path(input_root)
        self.output_root = Path(output_root)
        self.pattern = pattern
        self.mask_subdir = mask_subdir

        self.inputs = self._discover()

    def _discover(self) -> List[Path]:
        return sorted(p for p in self.input_root.glob(self.pattern) if p.is_file())

    def _output_path(self, input_path: Path) -> Path:
        return self.output_root / f"{input_path.stem}.png"

    def _mask_path(self, input_path: Path) -> Optional[Path]:
        if self.mask_subdir is None:
            return None
        return self.output_root / self.mask_subdir / f"{input_path.stem}.png"

    def render(
        self,
        num_workers: int = 4,
        skip_existing: bool = True,
        progress: bool = True,
    ) -> Dict[str, Any]:
        """Render all discovered images.

        Args:
            num_workers: number of parallel workers
            skip_existing: skip images whose output already exists
            progress: show progress bar

        Returns:
            dict with render statistics
        """
        jobs = []
        for index, path in enumerate(self.inputs):
            if skip_existing and self._output_path(path).exists():
                continue
            jobs.append((index, path))

        results = {"total": len(self.inputs), "processed": 0,
                   "skipped": len(self.inputs) - len(jobs), "errors": []}
        if not jobs:
            return results

        scene_dict = SceneCodec.encode(self.scene)
        logger.info("rendering %d of %d images from %s", len(jobs), len(self.inputs), self.input_root)

        def _collect(result):
            if result["status"] == "success":
                results["processed"] += 1
            else:
                logger.debug("%s failed: %s", result["name"], result["error"])
                results["errors"].append(result)

        if num_workers <= 1:
            iterator = tqdm(jobs, desc="Rendering") if progress else jobs
            for index, path in iterator:
                _collect(_render_file(path, self._output_path(path), self._mask_path(path), scene_dict, index))
        else:
            with ProcessPoolExecutor(max_workers=num_workers) as executor:
                futures = {
                    executor.submit(
                        _render_file, path, self._output_path(path), self._mask_path(path), scene_dict, index
                    ): path
                    for index, path in jobs
                }
                iterator = tqdm(as_completed(futures), total=len(futures), desc="Rendering") if progress else as_completed(futures)
                for future in iterator:
                    _collect(future.result())

        return results
