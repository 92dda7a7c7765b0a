"""Shared constants and paths for wavemesh."""

from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"
CONFIG_DIR = ASSETS_DIR / "config"
DEFAULT_CONFIG_FILE = "controls.json"

# Mesh generation scene
SPHERE_RADIUS = 5.0
PLANE_WIDTH = 10.0
PLANE_HEIGHT = 10.0
CYLINDER_RADIUS = 5.0
CYLINDER_HEIGHT = 10.0
TORUS_MAJOR_RADIUS = 5.0
TORUS_MINOR_RADIUS = 1.0

# Water surface: fixed dense grid, rotated to lie horizontally
WATER_PLANE_SIZE = 100.0
WATER_PLANE_SEGMENTS = 2000
LIGHT_POSITION = (200.0, 200.0, 700.0)

# Fallbacks for missing or non-numeric config values
DEFAULT_RESOLUTION = 0
DEFAULT_SPEED = 1.0
DEFAULT_NB_ITERATIONS = 1
DEFAULT_AMPLITUDE_MULTIPLIER = 1.0
DEFAULT_FREQUENCY_MULTIPLIER = 1.0

# Upper bounds applied when reading integer controls
MAX_RESOLUTION = 1024
MAX_NB_ITERATIONS = 64

# Frame loop
TARGET_FPS = 60

# Offscreen GL viewer
VIEWPORT_SIZE = (800, 600)
CAMERA_POSITION = (-2.0, 1.0, -7.0)
CAMERA_FOV_DEG = 75.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
CLEAR_COLOR = (0.0, 0.0, 0.0, 1.0)
