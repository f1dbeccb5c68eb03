"""Grid raycaster for .cub maps with XPM wall textures."""

__version__ = "0.1.0"
__all__ = ["__version__"]