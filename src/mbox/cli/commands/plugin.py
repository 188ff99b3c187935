"""`mbox plugin` commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from mbox.app.launcher.resolver import resolve_launcher_items
from mbox.app.plugins.registry import PluginRegistry
from mbox.domain.errors import ArgumentError
from mbox.domain.launcher import LauncherItem, LauncherType
from mbox.domain.plugin import PluginPackage
from mbox.utils.telemetry import record_event

from ..arguments import ParsedArguments
from ..command import Argument, Command, Flag, Option

if TYPE_CHECKING:  # pragma: no cover
    from ..context import CommandContext

ROLES_ENV = "MBOX_ROLES"


class PluginCommand(Command):
    name = "plugin"
    description = "Manage installed plugins"

    @property
    def registry(self) -> PluginRegistry:
        return self.context.registry


class ListCommand(PluginCommand):
    name = "list"
    description = "List all plugins"

    def run(self) -> None:
        if self.ui.api_enabled:
            self.output_data()
        else:
            self.output_plain()

    @property
    def packages(self) -> List[PluginPackage]:
        return list(self.registry.all_packages.values())

    def output_plain(self) -> None:
        for package in sorted(self.packages, key=lambda p: p.name):
            self.ui.log_info(package.detail_description())
            self.ui.log_info("")

    def output_data(self) -> None:
        self.ui.log_api({package.name: package.to_dict() for package in self.packages})


class LaunchCommand(PluginCommand):
    name = "launch"
    description = "Run a plugin launcher"

    @classmethod
    def arguments(cls) -> List[Argument]:
        return [Argument("name", "Launcher names, `plugin` or `plugin/item`", plural=True)]

    @classmethod
    def options(cls) -> List[Option]:
        options = super().options()
        options.append(Option("script", "Run the script name", values=tuple(kind.value for kind in LauncherType)))
        options.append(Option("role", f"Set current role, defaults to environment variable `{ROLES_ENV}`"))
        return options

    @classmethod
    def flags(cls) -> List[Flag]:
        flags = super().flags()
        flags.append(Flag("all", "All plugins"))
        return flags

    def __init__(self, context: "CommandContext", argv: ParsedArguments) -> None:
        super().__init__(context, argv)
        self.all = False
        self.script: LauncherType | None = None
        self.roles: List[str] = []
        self.launcher_item_names: List[str] = []
        self.launcher_items: List[LauncherItem] = []

    def setup_flags(self) -> None:
        super().setup_flags()
        self.all = self.shift_flag("all")

    def setup_options(self) -> None:
        super().setup_options()
        script_name = self.shift_option("script")
        if script_name is not None:
            script = LauncherType.parse(script_name)
            if script is None:
                raise ArgumentError.invalid_value(script_name, "script")
            self.script = script
        roles = self.shift_options("role")
        if roles is not None:
            self.roles = roles
        else:
            raw = self.context.environ.get(ROLES_ENV)
            if raw:
                self.roles = [role.strip() for role in raw.split(",") if role.strip()]

    def setup_arguments(self) -> None:
        super().setup_arguments()
        self.launcher_item_names = self.shift_arguments("name")

    def validate(self) -> None:
        super().validate()
        self.launcher_items = resolve_launcher_items(
            self.launcher_item_names,
            self.roles,
            self.registry,
            all_plugins=self.all,
        )

    def run(self) -> None:
        if self.launcher_items:
            self.ui.log_info(f"Launch {', '.join(item.identifier for item in self.launcher_items)}")
        with self.ui.indent():
            result = self.context.launcher_service().install_launcher_items(self.launcher_items, self.script)
        if self.ui.api_enabled:
            self.ui.log_api(result.to_dict())
        if self.ui.logfile_enabled:
            record_event(
                self.context.settings,
                "launch",
                result.to_dict(),
                status="ok" if not result.failed else "fail",
                environ=self.context.environ,
            )
        self.ui.status_code = result.exit_code


class LaunchAliasCommand(Command):
    name = "launch"
    description = "Run a plugin launcher (alias of `plugin launch`)"
    forward_command = LaunchCommand


__all__ = ["LaunchAliasCommand", "LaunchCommand", "ListCommand", "PluginCommand"]
