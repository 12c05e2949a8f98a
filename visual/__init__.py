from .renderer import render_session_frame, save_snapshot
from .colors import VISUAL_BG, get_tag_color, get_atom_color, tag_rgba

__all__ = [
    "render_session_frame", "save_snapshot",
    "VISUAL_BG", "get_tag_color", "get_atom_color", "tag_rgba"
]
