#
# Copyright 2024 kmplib Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import os
import sys
import importlib
import argparse

# setup path
# >>>>>>>>>>>>>>
SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]
PROJECT_ROOT_PATH = os.path.dirname(SCRIPT_PATH)
sys.path.append(PROJECT_ROOT_PATH)
PACKAGE_NAME = os.path.basename(SCRIPT_PATH)
# <<<<<<<<<<<<<<
# import this project modules
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.command import CliCommand


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """kmplib - Kotlin Multiplatform library configuration

Configures Kotlin Multiplatform library projects from a KMPLIB.toml:
targets (common, JVM, JS, Darwin), dependencies, language settings and
Maven publishing (Bintray, Sonatype).

USAGE:
    kmplib <command> [options]

COMMANDS:
    new         Create a new library project from a template
    check       Validate KMPLIB.toml and the resulting configuration
    show        Show the merged configuration of every module
    generate    Write Gradle build files for the library

EXAMPLES:
    kmplib new my-library            # Create new project
    kmplib check                     # Validate configuration
    kmplib show --module core        # Show one module
    kmplib generate --output build   # Write Gradle files to ./build

For more information on a specific command:
    kmplib <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if not command.startswith(("_", "test_")) and command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def _print_help(self):
        parser = argparse.ArgumentParser(
            prog="kmplib",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            choices=self.get_command_list(),
        )
        parser.print_help()

    def cli(self) -> CliNameSpace:
        # only `kmplib --help`, not `kmplib <command> --help`
        if len(sys.argv) == 2 and sys.argv[1] in ['--help', '-h']:
            self._print_help()
            sys.exit(0)

        parser = argparse.ArgumentParser(
            prog="kmplib",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=False,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs='?',
            choices=self.get_command_list(),
        )
        # parse only known args - this will NOT consume --help if present
        args, unknown = parser.parse_known_args(namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self._print_help()
            sys.exit(1)

        module = importlib.import_module(f"{PACKAGE_NAME}.commands.{args.subcommand}")
        klass = getattr(module, args.subcommand.capitalize())
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli())


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
