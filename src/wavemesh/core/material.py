"""Material definitions for rendering."""

from dataclasses import dataclass


@dataclass
class Material:
    """Rendering material properties."""
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    opacity: float = 1.0
    wireframe: bool = False
    double_sided: bool = False
    transparent: bool = False

    @staticmethod
    def from_hex(color_int: int, **kwargs) -> "Material":
        """Create material from integer hex color (e.g., 0x2a6fdb)."""
        r = ((color_int >> 16) & 0xFF) / 255.0
        g = ((color_int >> 8) & 0xFF) / 255.0
        b = (color_int & 0xFF) / 255.0
        return Material(color=(r, g, b), **kwargs)
