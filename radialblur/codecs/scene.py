"""Scene description encoding/decoding."""

import yaml
import numpy as np
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Union

from ..core import BlurConfig, PointSet


@dataclass
class PointSpec:
    """A blur point as written in a scene file; missing fields use defaults."""
    x: float
    y: float
    intensity: Optional[float] = None
    softness: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PointSpec":
        if "x" not in d or "y" not in d:
            raise ValueError(f"Point needs x and y: {d}")
        return cls(
            x=float(d["x"]),
            y=float(d["y"]),
            intensity=None if d.get("intensity") is None else float(d["intensity"]),
            softness=None if d.get("softness") is None else float(d["softness"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {"x": self.x, "y": self.y}
        if self.intensity is not None:
            d["intensity"] = self.intensity
        if self.softness is not None:
            d["softness"] = self.softness
        return d


@dataclass
class Scene:
    """Blur configuration plus the points to place on each image."""
    config: BlurConfig = field(default_factory=BlurConfig)
    points: List[PointSpec] = field(default_factory=list)
    units: str = "pixels"  # "pixels" | "relative"
    randomize: Optional[int] = None
    seed: Optional[int] = None

    def build_point_set(self, width: int, height: int, index: int = 0) -> PointSet:
        """Instantiate the scene's points for an image of the given size.

        ``index`` offsets the seed so that randomized scenes differ per image
        but stay reproducible.
        """
        seed = None if self.seed is None else self.seed + index
        point_set = PointSet(width, height, self.config, rng=np.random.default_rng(seed))

        if self.randomize is not None:
            point_set.randomize(self.randomize)
            return point_set

        sx, sy = (width, height) if self.units == "relative" else (1.0, 1.0)
        for spec in self.points:
            point_set.add(spec.x * sx, spec.y * sy, spec.intensity, spec.softness)
        return point_set


class SceneCodec:
    """Encode/decode scene descriptions to/from dicts and YAML files.

    Format:
    ```yaml
    version: 1
    config:
      global_max: 10
      invert: false
    units: pixels
    points:
      - {x: 400, y: 250, intensity: 8, softness: 100}
    # or, instead of points:
    randomize: 5
    seed: 42
    ```
    """

    VERSION = 1
    UNITS = ("pixels", "relative")

    @classmethod
    def encode(cls, scene: Scene) -> Dict[str, Any]:
        data = {
            "version": cls.VERSION,
            "config": scene.config.to_dict(),
            "units": scene.units,
            "points": [p.to_dict() for p in scene.points],
        }
        data["config"]["random_softness"] = list(scene.config.random_softness)
        if scene.randomize is not None:
            data["randomize"] = scene.randomize
        if scene.seed is not None:
            data["seed"] = scene.seed
        return data

    @classmethod
    def decode(cls, data: Optional[Dict[str, Any]]) -> Scene:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Scene must be a mapping, got {type(data).__name__}")

        try:
            version = int(data.get("version", cls.VERSION))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid scene version: {data.get('version')!r}")
        if version > cls.VERSION:
            raise ValueError(f"Unsupported scene version: {version}")

        units = data.get("units", "pixels")
        if units not in cls.UNITS:
            raise ValueError(f"Unknown units: {units}")

        randomize = data.get("randomize")
        seed = data.get("seed")
        return Scene(
            config=BlurConfig.from_dict(data.get("config") or {}),
            points=[PointSpec.from_dict(p) for p in data.get("points") or []],
            units=units,
            randomize=None if randomize is None else int(randomize),
            seed=None if seed is None else int(seed),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> Scene:
        """Load a scene from a YAML file."""
        with open(path) as f:
            return cls.decode(yaml.safe_load(f))

    @classmethod
    def dumps(cls, scene: Scene) -> str:
        return yaml.safe_dump(cls.encode(scene), sort_keys=False)
