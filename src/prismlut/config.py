"""Default configuration, constants, and limits for Prism."""

# --- Security limits ---
MAX_IMAGE_DIMENSION = 16384  # 16K pixels per side
MAX_IMAGE_PIXELS = 100_000_000  # 100 megapixels
MAX_CUBE_SIZE = 256  # Maximum .cube grid size (256^3 ~ 16.7M nodes)
MAX_HALD_LEVEL = 16  # 4096x4096 image, 256^3 LUT

# --- Allowed file extensions ---
IMAGE_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp",
})
CUBE_EXTENSIONS = frozenset({".cube"})
HALD_EXTENSIONS = frozenset({".png"})

# --- Grid (.cube) format ---
CUBE_DECIMALS = 6  # Decimal places written per sample channel
DEFAULT_DOMAIN_MIN = (0.0, 0.0, 0.0)
DEFAULT_DOMAIN_MAX = (1.0, 1.0, 1.0)

# --- Hald defaults ---
DEFAULT_HALD_LEVEL = 12  # 1728x1728 image, 144^3 LUT
HALD_BIT_DEPTH = 8

# --- Image output ---
JPEG_QUALITY = 95

# --- Image application ---
DEFAULT_ROWS_PER_TASK = 64  # Scanlines handed to a worker per task
MAX_APPLY_WORKERS = 32

# --- CLI ---
OUTPUT_INFIX = ".prism"  # image.png -> image.prism.png
