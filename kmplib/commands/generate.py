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
import shutil
import argparse

# import this project modules
from kmplib.gradle.jvm_variant import variant_projects
from kmplib.gradle.module import module_projects
from kmplib.gradle.render import (
    render_build_script,
    render_gradle_properties,
    render_settings_script,
)
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.command import CliCommand


def project_output_dir(output_dir: str, path: str) -> str:
    segments = [s for s in path.split(":") if s]
    return os.path.join(output_dir, *segments)


def write_file(path: str, content: str, backup: bool = True, verbose: bool = False):
    """Write a generated file, keeping a .backup of a different existing file."""
    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            if f.read() == content:
                if verbose:
                    print(f"  Unchanged: {path}")
                return
        if backup:
            shutil.copyfile(path, path + ".backup")
            if verbose:
                print(f"  Backed up existing {os.path.basename(path)} to {path}.backup")

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    print(f"  Generated: {path}")


class Generate(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to write the Gradle build files of the library.

        Writes settings.gradle.kts and gradle.properties for the root project
        and a build.gradle.kts for the root project, every module and every JVM
        library variant.
        Credentials are never written; the build reads them from Gradle
        properties (bintrayUser, bintrayApiKey, sonatypeUserName,
        sonatypePassword).

        Examples:
            kmplib generate
            kmplib generate --output out --no-backup
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="kmplib generate",
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
            "--output",
            action="store",
            default=None,
            help="Output directory (default: the project directory)",
        )
        parser.add_argument(
            "--no-backup",
            action="store_true",
            help="Overwrite existing files without keeping a .backup copy",
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
        output_dir = args.output or context.project_dir
        backup = not args.no_backup

        root = self.load_workspace(context, verbose=args.verbose).exit_on_failure()

        print(f"Generating Gradle files for '{root.name}' in {output_dir}...")
        write_file(os.path.join(output_dir, "settings.gradle.kts"),
                   render_settings_script(root), backup, args.verbose)
        write_file(os.path.join(output_dir, "gradle.properties"),
                   render_gradle_properties(root), backup, args.verbose)

        projects = module_projects(root) + variant_projects(root)
        if root not in projects:
            projects.insert(0, root)
        for project in projects:
            path = os.path.join(project_output_dir(output_dir, project.path), "build.gradle.kts")
            write_file(path, render_build_script(project), backup, args.verbose)

        print(f"\nGenerated build files for {len(projects)} project(s)")
