"""Configuration constants for the dok web backend."""

import os
from pathlib import Path

# Project root used for .dok/settings.json lookup
WORKSPACE_ROOT = Path(os.environ.get("DOK_WORKSPACE_ROOT", str(Path.cwd()))).expanduser().resolve()

DEFAULT_PORT = 8080
