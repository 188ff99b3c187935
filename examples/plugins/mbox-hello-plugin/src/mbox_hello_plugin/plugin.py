from __future__ import annotations

from typing import List

from mbox.cli.command import Command, Option
from mbox.plugins import CommandRegistrar, PluginContext


class HelloCommand(Command):
    name = "hello"
    description = "Say hello from a plugin"

    @classmethod
    def options(cls) -> List[Option]:
        options = super().options()
        options.append(Option("name", "Name to greet"))
        return options

    def setup_options(self) -> None:
        super().setup_options()
        self.greeted = self.shift_option("name") or "mbox"

    def run(self) -> None:
        version = self.context.settings.cli_version
        if self.ui.api_enabled:
            self.ui.log_api({"greeting": f"Hello, {self.greeted}!", "version": version})
        else:
            self.ui.log_info(f"Hello, {self.greeted}! mbox version {version}")


class HelloPlugin:
    name = "hello"

    def register(self, registrar: CommandRegistrar, context: PluginContext) -> None:
        registrar.add_command("hello", HelloCommand)


def register(registrar: CommandRegistrar, context: PluginContext) -> None:
    HelloPlugin().register(registrar, context)
