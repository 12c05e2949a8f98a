from typing import Dict, Tuple

# -----------------------------
# Utility functions
# -----------------------------

def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """'#RRGGBB' (leading '#' optional) -> (r, g, b) in 0-1."""
    digits = hex_color.strip().lstrip('#')
    if len(digits) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    return tuple(int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def rgba_255_to_mpl(r: float, g: float, b: float, alpha: float) -> Tuple[float, float, float, float]:
    """0-255 channels plus 0-1 alpha, as produced by the indicator model, to a matplotlib RGBA tuple."""
    return (r / 255.0, g / 255.0, b / 255.0, max(0.0, min(1.0, alpha)))


# -----------------------------
# Color tags
# -----------------------------

# particle color tags used by the particle demonstrations
TAG_COLORS: Dict[str, str] = {
    "solution": "#3b82f6",
    "colloid": "#f59e0b",
    "suspension": "#78350f",
    "element-a": "#3b82f6",
    "compound-a": "#ef4444",
    "compound-b": "#22c55e",
    "mixture": "#ef4444",
    "mixture-b": "#eab308",
}

# projection roles
ROLE_COLORS: Dict[str, str] = {
    "central": "#7c3aed",
    "bonded": "#3b82f6",
    "lonePair": "#fbbf24",
}

# element labels shown in the projection and Bohr views
ELEMENT_COLORS: Dict[str, str] = {
    "H": "#e5e7eb",
    "C": "#374151",
    "N": "#3050f8",
    "O": "#ff0d0d",
    "Na": "#ab5cf2",
    "Cl": "#1ff01f",
    "Zn": "#7d80b0",
    "Cu": "#c88033",
    "Fe": "#e06633",
}


def get_tag_color(tag: str, fallback: str = '#888888') -> str:
    return TAG_COLORS.get(tag, fallback)


def tag_rgba(tag: str, alpha: float = 0.8) -> Tuple[float, float, float, float]:
    """matplotlib RGBA for a particle color tag."""
    r, g, b = hex_to_rgb(get_tag_color(tag))
    return (r, g, b, alpha)


def get_atom_color(role: str, label: str = "", fallback: str = '#888888') -> str:
    """
    Element color when the label names a known element, role color otherwise.
    """
    if label and label in ELEMENT_COLORS:
        return ELEMENT_COLORS[label]
    return ROLE_COLORS.get(role, fallback)


# Visual constants
VISUAL_BG = "#FFFFFF"
VISUAL_CONTAINER = "#94a3b8"
VISUAL_BEAM = "#fde047"
