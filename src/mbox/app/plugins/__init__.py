from .registry import PluginRegistry, load_workspace_plugins, workspace_config_path

__all__ = ["PluginRegistry", "load_workspace_plugins", "workspace_config_path"]
