"""RadialBlur Generators: batch rendering over image directories."""

from .batch_renderer import BatchRenderer

__all__ = ["BatchRenderer"]
