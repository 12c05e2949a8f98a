"""Headless titration run: full 0 -> 50 mL curve plus a PNG of the final frame.

Usage: python scripts/headless_run.py [methyl-orange]
"""
import os
import sys

import matplotlib
matplotlib.use("Agg")

# Ensure project root is on sys.path when running from scripts/
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from engine.simulation_manager import SimulationSession
from visual.renderer import save_snapshot

OUT_DIR = "outputs"
os.makedirs(OUT_DIR, exist_ok=True)

session = SimulationSession.for_topic("titration")
if len(sys.argv) > 1:
    session.select_variant(sys.argv[1])

print(f"Starting headless titration ({session.simulation.variant})")
session.advance(100)

for sample in session.history:
    v = sample.outputs["volume"]
    if v % 5 == 0 or sample.outputs["at_equivalence"]:
        print(f"  V = {v:5.1f} mL  pH = {sample.outputs['ph']:6.3f}")

path = save_snapshot(session, os.path.join(OUT_DIR, "titration.png"))
print("Wrote frame to:", path)
print('Headless run complete, tick count =', session.tick_index)
