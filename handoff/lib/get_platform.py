import os
import sys
from pathlib import Path

PACKAGE = "handoff"


def get_data_directory() -> Path:
    """
    Returns the writable data directory for handoff, creating it if needed.
    Windows: %APPDATA%/handoff
    Linux/Mac: ~/.handoff
    """
    if sys.platform == "win32":
        # Result: C:\Users\Username\AppData\Roaming\handoff
        base_path = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        path = Path(base_path) / PACKAGE
    else:
        path = Path.home() / f".{PACKAGE}"

    path.mkdir(parents=True, exist_ok=True)
    return path


def get_log_directory() -> Path:
    """Get the log directory path based on the operating system"""
    if sys.platform == "win32":
        return Path.home() / "AppData" / "Local" / PACKAGE / "Logs"
    return Path.home() / f".{PACKAGE}" / "logs"
