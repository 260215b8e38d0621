"""
#WHERE
    Imported by the scene profiles (M1), session.py and main.py — single
    source of truth for the compiled-in scene constants.

#WHAT
    Asset paths, lift/car heights, scale factors, paint palette and
    renderer defaults.  Edit here, not in individual module files.

#INPUT / #OUTPUT
    Pure constants — no I/O.
"""

import math

# ── Assets ───────────────────────────────────────────────────────────────

DEFAULT_ASSETS_DIR: str = "assets/models"
LIFT_MODEL: str = "elevador.glb"
PORSCHE_MODEL: str = "porche.glb"
AVENTADOR_MODEL: str = "aventador.glb"

# ── Lift / car placement (metres, Y-up) ──────────────────────────────────

LIFT_BASE_Y: float = 0.02       # lift sits just above the floor
CAR_BASE_Y: float = 1.65        # tyre contact height on the lift platform
FIXED_LIFT_HEIGHT: float = 1.5  # 0 = on the floor, 1.5 = working height
LIFT_SCALE: float = 1.2
CAR_SCALE: float = 1.0
CAR_YAW: float = math.pi / 5    # slight turn towards the camera
MAX_MODEL_SIZE: float = 6.0     # bounding-box normalisation threshold

# ── Paint palette (material name convention: "carpaint") ─────────────────

PAINT_TARGET: str = "carpaint"
PAINT_COLORS: tuple = (
    "#c00000",  # rosso
    "#f2f2f2",  # bianco
    "#101010",  # nero
    "#1f4fa8",  # blu
    "#f4b400",  # giallo
    "#2e7d32",  # verde
)

# ── Rendering ────────────────────────────────────────────────────────────

DEFAULT_FPS: int = 30
DEFAULT_WIDTH: int = 960
DEFAULT_HEIGHT: int = 540
DEFAULT_OUTPUT_DIR: str = "outputs"
