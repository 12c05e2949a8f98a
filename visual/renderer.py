import os
import time
from typing import Any, Dict, Optional
import logging

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Rectangle

from visual.colors import (
    VISUAL_BEAM,
    VISUAL_BG,
    VISUAL_CONTAINER,
    get_atom_color,
    rgba_255_to_mpl,
    tag_rgba,
)

logger = logging.getLogger(__name__)


def render_session_frame(session, fig=None):
    """
    Render the latest snapshot of a SimulationSession into a matplotlib figure.

    Args:
        session: SimulationSession to draw.
        fig: existing Figure to draw into. A new one is created when None.

    Returns:
        The Figure.
    """
    if fig is None:
        fig = plt.figure(figsize=(6, 4.5), facecolor=VISUAL_BG)
    fig.clear()
    ax = fig.add_subplot(1, 1, 1)
    ax.set_facecolor(VISUAL_BG)

    snap = session.snapshot()
    drawer = _DRAWERS.get(snap["tag"], _draw_outputs)
    drawer(ax, snap)

    title = snap.get("title") or snap["tag"]
    if snap.get("variant"):
        title = f"{title} ({snap['variant']})"
    ax.set_title(title, fontsize=11, pad=8)
    fig.tight_layout()
    return fig


def save_snapshot(session, filename: Optional[str] = None, dpi: int = 120) -> str:
    """
    Save the session's current frame as a PNG and return the path.
    """
    if filename is None:
        filename = os.path.join("outputs", f"{session.topic_id}_{int(time.time())}.png")
    parent = os.path.dirname(filename)
    if parent:
        os.makedirs(parent, exist_ok=True)
    fig = render_session_frame(session)
    try:
        fig.savefig(filename, dpi=dpi, bbox_inches='tight')
    finally:
        plt.close(fig)
    logger.info(f"Saved frame to {filename}")
    return filename


# -----------------------------
# Per-demonstration drawers
# -----------------------------

def _clean_axes(ax, xlim, ylim, invert_y: bool = True) -> None:
    ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)
    if invert_y:
        # screen coordinates: y grows downward
        ax.invert_yaxis()
    ax.set_aspect('equal')
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)


def _draw_particles(ax, snap: Dict[str, Any]) -> None:
    xmin, xmax, ymin, ymax = snap["bounds"]
    _clean_axes(ax, (xmin - 15, xmax + 15), (ymin - 15, ymax + 15))
    ax.add_patch(Rectangle((xmin, ymin), xmax - xmin, ymax - ymin, fill=False,
                           edgecolor=VISUAL_CONTAINER, linewidth=1.5))
    if snap.get("tyndall"):
        mid = (ymin + ymax) / 2.0
        ax.fill_between([xmin, xmax], mid - 6, mid + 6, color=VISUAL_BEAM, alpha=0.35, zorder=1)
    for p in snap["particles"]:
        ax.add_patch(Circle((p["x"], p["y"]), p["radius"], color=tag_rgba(p["color"]), zorder=2))
    if snap.get("size_label"):
        ax.text(xmin, ymax + 10, f"particle size {snap['size_label']}", fontsize=8, va='top')


def _draw_projection(ax, snap: Dict[str, Any]) -> None:
    _clean_axes(ax, (-120, 120), (-120, 120))
    for b in snap["bonds"]:
        ax.plot([b.x1, b.x2], [b.y1, b.y2], color='#475569', linewidth=2.5,
                linestyle='--' if b.dashed else '-', alpha=b.opacity, zorder=1)
    # atoms arrive sorted back-to-front
    for z, a in enumerate(snap["atoms"]):
        ax.add_patch(Circle((a.x, a.y), a.radius, color=get_atom_color(a.role, a.label),
                            alpha=a.opacity, zorder=2 + z))
        if a.label:
            ax.text(a.x, a.y, a.label, ha='center', va='center', fontsize=8, zorder=2 + z)
    if snap.get("delocalized_ring"):
        ax.add_patch(Circle((0, 0), 25, fill=False, edgecolor='#475569', linewidth=1.5, zorder=50))
    if snap.get("formula"):
        ax.text(-115, 115, f"{snap['formula']}  {snap['angle']}", fontsize=8)


def _draw_atom_structure(ax, snap: Dict[str, Any]) -> None:
    from engine.models import SHELL_RADII
    _clean_axes(ax, (0, 200), (0, 200))
    shells = len(snap["configuration"].split("-"))
    for r in SHELL_RADII[:shells]:
        ax.add_patch(Circle((100, 100), r, fill=False, edgecolor=VISUAL_CONTAINER, linestyle=':'))
    ax.add_patch(Circle((100, 100), 12, color='#ef4444', zorder=2))
    ax.text(100, 100, snap["variant"], ha='center', va='center', fontsize=9, color='white', zorder=3)
    for _, x, y in snap["electron_positions"]:
        ax.add_patch(Circle((x, y), 3.5, color='#3b82f6', zorder=3))
    ax.text(2, 195, snap["configuration"], fontsize=8)


def _draw_history(ax, snap: Dict[str, Any], x_key: Optional[str], y_keys, xlabel: str, ylabel: str) -> None:
    history = snap["history"]
    xs = [h["outputs"].get(x_key, h["tick"]) if x_key else h["tick"] for h in history]
    for key in y_keys:
        ax.plot(xs, [h["outputs"].get(key, float('nan')) for h in history], label=key)
    ax.set_xlabel(xlabel, fontsize=8)
    ax.set_ylabel(ylabel, fontsize=8)
    ax.tick_params(axis='both', which='major', labelsize=8)
    if len(y_keys) > 1:
        ax.legend(loc='upper right', fontsize=7)


def _draw_equilibrium(ax, snap: Dict[str, Any]) -> None:
    _draw_history(ax, snap, None, ("forward", "reverse"), "tick", "rate")
    if snap.get("equilibrium_reached"):
        ax.text(0.02, 0.95, "equilibrium", transform=ax.transAxes, fontsize=8, color='#16a34a', va='top')


def _draw_titration(ax, snap: Dict[str, Any]) -> None:
    _draw_history(ax, snap, "volume", ("ph",), "titrant volume (mL)", "pH")
    ax.set_xlim(0, 50)
    ax.set_ylim(0, 14)
    ax.axvline(snap["equivalence_volume"], color=VISUAL_CONTAINER, linestyle=':')
    color = snap["color"]
    ax.add_patch(Rectangle((0.82, 0.05), 0.12, 0.25, transform=ax.transAxes,
                           color=rgba_255_to_mpl(color.r, color.g, color.b, color.alpha)))


def _draw_steps(ax, snap: Dict[str, Any]) -> None:
    ax.axis('off')
    phase = snap["phase"]
    ax.text(0.5, 0.7, f"Step {snap['step_index'] + 1}/{snap['step_count']}: {phase.title}",
            ha='center', fontsize=11, transform=ax.transAxes)
    ax.text(0.5, 0.5, phase.description, ha='center', fontsize=9, wrap=True, transform=ax.transAxes)
    if "orbitals" in snap:
        o = snap["orbitals"]
        ax.text(0.5, 0.3, f"{o['hybrid']} hybrid orbitals, {o['geometry']}, {o['angle']}",
                ha='center', fontsize=9, transform=ax.transAxes)


def _draw_redox(ax, snap: Dict[str, Any]) -> None:
    from engine.models import electron_arc_position
    _clean_axes(ax, (40, 260), (20, 160))
    visual = snap["visual"]
    ax.add_patch(Circle((100, 100), visual.reducer_radius * visual.reducer_scale, color='#94a3b8',
                        alpha=visual.reducer_opacity))
    ax.add_patch(Circle((200, 100), 30 * visual.oxidizer_scale,
                        color='#22c55e' if visual.oxidizer_is_product else '#3b82f6'))
    if visual.show_transfer_arrow:
        xs, ys = zip(*[electron_arc_position(p) for p in range(0, 101, 10)])
        ax.plot(xs, ys, color='#f59e0b', linestyle='--', linewidth=1)
    for x, y in snap["electrons"]:
        ax.add_patch(Circle((x, y), 4, color='#facc15', zorder=3))
    ax.text(50, 150, f"{snap['reaction']['equation']}  [{visual.phase}]", fontsize=8)


def _draw_galvanic(ax, snap: Dict[str, Any]) -> None:
    masses = snap["masses"]
    ax.bar(["Zn", "Cu"], [masses.zinc, masses.copper], color=['#7d80b0', '#c88033'])
    ax.set_ylim(0, 200)
    ax.set_ylabel("electrode mass", fontsize=8)
    ax.text(0.5, 0.92, f"{len(snap['electrons'])} electrons in the external circuit",
            ha='center', fontsize=8, transform=ax.transAxes)


def _draw_outputs(ax, snap: Dict[str, Any]) -> None:
    ax.axis('off')
    if "message" in snap:
        ax.text(0.5, 0.5, snap["message"], ha='center', va='center', fontsize=9, wrap=True, transform=ax.transAxes)
        return
    lines = [f"{k}: {v:g}" for k, v in snap.get("outputs", {}).items()]
    ax.text(0.05, 0.9, "\n".join(lines) or "no ticks yet", va='top', fontsize=9, family='monospace',
            transform=ax.transAxes)


_DRAWERS = {
    "dispersion": _draw_particles,
    "matter-types": _draw_particles,
    "vsepr": _draw_projection,
    "benzene": _draw_projection,
    "atom-structure": _draw_atom_structure,
    "equilibrium": _draw_equilibrium,
    "titration": _draw_titration,
    "ionic-bond": _draw_steps,
    "hybridization": _draw_steps,
    "redox": _draw_redox,
    "galvanic-cell": _draw_galvanic,
}
