# -----------------------
# Tick scheduling
# -----------------------
DEFAULT_TICK_INTERVAL_MS = 50   # wall-clock interval between ticks
DEFAULT_HISTORY_CAPACITY = 30   # sliding window of TickSamples per session

# -----------------------
# Equilibrium (rate convergence)
# -----------------------
EQUILIBRIUM_HORIZON = 20        # ticks until forward/reverse blend is complete
EQUILIBRIUM_INTERVAL_MS = 300

# -----------------------
# Titration
# -----------------------
ANALYTE_VOLUME_ML = 25.0
ANALYTE_CONCENTRATION = 0.1     # mol/L NaOH
TITRANT_CONCENTRATION = 0.1     # mol/L HCl
TITRANT_STEP_ML = 0.5
TITRANT_MAX_ML = 50.0
TITRATION_INTERVAL_MS = 200
TITRATION_HISTORY_CAPACITY = 101

# -----------------------
# Particle container
# -----------------------
CONTAINER_BOUNDS = (20.0, 280.0, 20.0, 180.0)   # xmin, xmax, ymin, ymax
MATTER_BOUNDS = (10.0, 290.0, 10.0, 190.0)
SETTLING_FLOOR = 170.0
BROWNIAN_KICK = 0.25            # half-width of the uniform velocity perturbation
SETTLING_DRIFT = 0.3
SETTLING_JITTER = 0.25
TETHER_AMPLITUDE = 5.0

# -----------------------
# Molecular projection
# -----------------------
MOLECULE_SCALE = 60.0
AUTOROTATE_STEP_DEG = 0.5
DRAG_DEGREES_PER_PIXEL = 0.5
PROJECTION_INTERVAL_MS = 50

# -----------------------
# Logging
# -----------------------
LOGGING_LEVEL = "INFO"  # options: DEBUG, INFO, WARNING, ERROR

# -----------------------
# Misc
# -----------------------
EPSILON = 1e-12  # small value to prevent div by zero or numerical issues
