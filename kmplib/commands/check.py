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
import argparse

# import this project modules
from kmplib.gradle.jvm_variant import applied_variant, variant_projects
from kmplib.gradle.module import applied_configuration, module_projects
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.command import CliCommand


class Check(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to validate KMPLIB.toml.

        The library and every module are configured exactly as 'generate'
        would, without writing anything. The first configuration error is
        reported and the command exits with status 1.

        Examples:
            kmplib check
            kmplib check --project-dir path/to/library --verbose
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="kmplib check",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--project-dir",
            action="store",
            default=None,
            help="Directory containing KMPLIB.toml (default: current directory)",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed information",
        )
        module_name = os.path.splitext(os.path.basename(__file__))[0]
        input_argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(input_argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if args.project_dir:
            context.project_dir = args.project_dir

        print(f"Checking {context.project_dir}...")
        result = self.load_workspace(context, verbose=args.verbose)
        if result.is_failure():
            print(f"\nError: {result.get_error()}")
            sys.exit(1)

        root = result.get_value()
        modules = module_projects(root)
        print(f"\n✓ Library '{root.name}' {root.version} is valid ({len(modules)} module(s))")
        for project in modules:
            configuration = applied_configuration(project)
            targets = ", ".join(tag for tag, _ in configuration.targets.configured())
            publishing = "published" if configuration.is_publishing_enabled else "not published"
            print(f"  {project.path}: {targets} ({publishing})")
        for project in variant_projects(root):
            variant = applied_variant(project)
            publishing = "published" if variant.publishing else "not published"
            print(f"  {project.path}: JVM variant, jdk {variant.jdk} ({publishing})")
