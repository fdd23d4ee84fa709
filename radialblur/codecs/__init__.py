from .scene import SceneCodec, Scene, PointSpec

__all__ = ["SceneCodec", "Scene", "PointSpec"]
