from .resolver import resolve_launcher_items, split_launcher_name
from .service import LauncherService, run_script

__all__ = ["LauncherService", "resolve_launcher_items", "run_script", "split_launcher_name"]
