"""
Environment Variable Loader

Loads deployment settings (SOUND_TREASURY_API_URL, SOUND_TREASURY_CACHE_DIR, ...)
from config/secrets.env so `Config.from_env()` sees them.

Usage:
    # Import at the top of the entry point - variables are auto-loaded
    import sound_treasury.env_loader
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_environment_variables(env_file: Optional[str] = None, verbose: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        env_file: Path to .env file (default: config/secrets.env)
        verbose: Print debug information

    Returns:
        True if environment variables were loaded, False otherwise
    """
    if env_file is None:
        project_root = Path(__file__).parent.parent
        env_path = project_root / "config" / "secrets.env"
    else:
        env_path = Path(env_file)

    if not env_path.exists():
        if verbose:
            print(f"⚠️  Environment file not found: {env_path}")
        return False

    # Never override variables already set in the process environment
    load_dotenv(env_path, override=False)

    if verbose:
        print(f"✓ Loaded environment variables from {env_path}")
        configured = [key for key in ("SOUND_TREASURY_API_URL", "SOUND_TREASURY_CACHE_DIR") if os.getenv(key)]
        if configured:
            print(f"  Configured: {', '.join(configured)}")

    return True


_loaded = load_environment_variables(verbose=False)


def is_environment_loaded() -> bool:
    """Check if environment variables were successfully loaded."""
    return _loaded


__all__ = [
    "load_environment_variables",
    "is_environment_loaded",
]
