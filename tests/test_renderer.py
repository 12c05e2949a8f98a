import matplotlib
matplotlib.use("Agg")

import pytest

from engine.dispatch import TOPIC_SIMULATIONS
from engine.simulation_manager import SimulationSession
from matplotlib.patches import Circle

from visual.colors import get_tag_color, hex_to_rgb, rgba_255_to_mpl, tag_rgba
from visual.renderer import render_session_frame, save_snapshot


def first_topic_for(tag):
    return next(t for t, v in TOPIC_SIMULATIONS.items() if v == tag)


@pytest.mark.parametrize("tag", sorted(set(TOPIC_SIMULATIONS.values())))
def test_every_demonstration_renders(tag, tmp_path):
    session = SimulationSession.for_topic(first_topic_for(tag), seed=1)
    session.advance(30)
    out = save_snapshot(session, str(tmp_path / f"{tag}.png"))
    assert (tmp_path / f"{tag}.png").exists()
    assert out.endswith(".png")


def test_placeholder_renders(tmp_path):
    session = SimulationSession.for_topic("nonexistent-topic")
    fig = render_session_frame(session)
    assert fig.axes
    save_snapshot(session, str(tmp_path / "placeholder.png"))
    assert (tmp_path / "placeholder.png").stat().st_size > 0


def test_color_helpers():
    assert hex_to_rgb("#ff0000") == (1.0, 0.0, 0.0)
    assert rgba_255_to_mpl(255, 0, 0, 1.5) == (1.0, 0.0, 0.0, 1.0)
    with pytest.raises(ValueError):
        hex_to_rgb("#fff")


def test_particle_tags_map_to_rgba():
    r, g, b, a = tag_rgba("suspension", alpha=0.5)
    assert (r, g, b) == pytest.approx(hex_to_rgb(get_tag_color("suspension")))
    assert a == 0.5
    # unknown tags fall back to grey
    assert tag_rgba("unknown")[:3] == pytest.approx((0x88 / 255.0,) * 3)


def test_particle_patches_use_tag_colors():
    session = SimulationSession.for_topic("dispersion-system", seed=2)
    session.advance(1)
    fig = render_session_frame(session)
    circles = [p for p in fig.axes[0].patches if isinstance(p, Circle)]
    assert len(circles) == 50
    assert tuple(circles[0].get_facecolor()) == pytest.approx(tag_rgba("solution"))
