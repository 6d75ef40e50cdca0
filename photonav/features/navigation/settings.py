"""Default values for step discovery and prefetch."""

# Asset layout: <ASSET_ROOT>/<destination>/<index><IMAGE_SUFFIX>
ASSET_ROOT = "photos-navigation"
IMAGE_SUFFIX = ".png"
FIRST_STEP_INDEX = 1

# Upper bound on existence probes per discovery run
MAX_PROBES = 50

# Per-request timeouts (seconds)
PROBE_TIMEOUT_S = 5.0
PREFETCH_TIMEOUT_S = 15.0

# HTTP asset host used when no base URL is configured
ASSET_BASE_URL = "http://localhost:5173"
PREFETCH_ENABLED = True
