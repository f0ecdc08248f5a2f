"""Filesystem locations shared by the scheduler, API and migrations."""

from pathlib import Path

# src/paths.py -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Optional dotenv file read by every settings object
ENV_FILE = PROJECT_ROOT / ".env"
