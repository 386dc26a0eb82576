"""
Centralized configuration knobs and thresholds.
Change values here to tune behavior without touching the modules.
"""

# Grid definition file
GRID_HEADER: str = "Longitude\tLatitude\tHeight"
HEADER_DELIMITER: str = "\t"
COMMENT_PREFIX: str = "#"  # only honoured in batch points files, never in grids

# Model resolution (CLI only; the core never reads the environment)
DEFAULT_MODEL_PATH: str = "GeodPT08.dat"
MODEL_PATH_ENV: str = "GEOID_MODEL_PATH"

# Node validation during assembly
CHECK_NODE_COORDINATES: bool = True
NODE_TOLERANCE: float = 1e-3  # fraction of |step| a record may drift from its node

# Interpolation
BOUNDS_POLICY: str = "extrapolate"  # "extrapolate" | "raise"
BOUNDS_POLICIES = ("extrapolate", "raise")

# Outputs
RESULTS_FILENAME: str = "heights.csv"
MANIFEST_FILENAME: str = "manifest.json"
OUTPUT_PRECISION: int = 4  # decimals written for heights
