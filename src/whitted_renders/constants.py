"""
Tuning constants and configuration defaults for the Whitted renderer and the
best-candidate samplers.
"""

# Recursion termination
DEFAULT_MAX_LEVEL = 12
DEFAULT_MIN_IMPORTANCE = 0.05

# Self-intersection guard for secondary rays
RAY_EPSILON = 1e-6

# Length of the diagnostic segment registered for rays leaving the scene
MISS_RAY_LENGTH = 1000.0

# Hash multipliers for adaptive supersampling signatures
HASH_REFRACT = 13
HASH_REFLECT = 17
HASH_TEXTURE = 101
HASH_LIGHT = 307
HASH_MISS = 1
HASH_NO_RAY = 11
HASH_MASK = (1 << 64) - 1

# Spectral bands (RGB unless the caller says otherwise)
DEFAULT_BANDS = 3

# Adaptive supersampling
DEFAULT_SUPERSAMPLING = 4
SUPERSAMPLING_PARAMS = "k=6"

# Best-candidate sampling
DEFAULT_CANDIDATES = 5
DENSITY_FLOOR = 1e-4
BREAK_CHECK_MASK = 0xF

# Sample-generator front end (mirrors the classic dart-throwing demo)
DEFAULT_SAMPLE_COUNT = 1024
DEFAULT_SEED = 12
DEFAULT_RESOLUTION = 512
DEFAULT_SAMPLER_PARAMS = "k=6"
PROGRESS_INTERVAL = 256

# Default demo scene
BACKGROUND_COLOR = [0.1, 0.2, 0.3]
IMAGE_WIDTH = 320
IMAGE_HEIGHT = 240
CAMERA_FOV = 50.0
