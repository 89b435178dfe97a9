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
from kmplib.config.module import LibraryModuleConfiguration
from kmplib.config.targets import JsTarget, JvmTarget, NativeDarwinTarget
from kmplib.gradle.jvm_variant import JvmLibraryVariantConfiguration, applied_variant, variant_projects
from kmplib.gradle.module import applied_configuration, module_projects
from kmplib.gradle.render import render_notation
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.command import CliCommand


def get_config_summary(configuration: LibraryModuleConfiguration) -> str:
    """Get a summary of a merged module configuration for display."""
    lines = []
    if configuration.description:
        lines.append(f"  Description: {configuration.description}")
    lines.append(f"  Publishing: {'Enabled' if configuration.is_publishing_enabled else 'Disabled'}")
    if configuration.is_publishing_single_target_as_module:
        lines.append("  Single target published as module: yes")

    language = configuration.language
    if language.experimental_apis:
        lines.append(f"  Experimental APIs: {', '.join(sorted(language.experimental_apis))}")
    if language.language_features:
        lines.append(f"  Language features: {', '.join(sorted(language.language_features))}")
    lines.append(f"  Explicit API: {'off' if language.no_explicit_api else 'strict'}")
    lines.append(f"  New inference: {'off' if language.no_new_inference else 'on'}")

    for tag, target in configuration.targets.configured():
        switches = []
        if isinstance(target, JvmTarget):
            if target.jdk:
                switches.append(f"jdk {target.jdk}")
            if target.includes_java:
                switches.append("with Java")
        elif isinstance(target, JsTarget):
            if target.no_browser:
                switches.append("no browser")
            if target.no_node_js:
                switches.append("no Node.js")
        elif isinstance(target, NativeDarwinTarget):
            switches.append(", ".join(target.platforms()))
        if not target.enforces_same_version_for_all_kotlin_dependencies:
            switches.append("mixed Kotlin versions allowed")

        suffix = f" ({'; '.join(switches)})" if switches else ""
        lines.append(f"  Target {tag}{suffix}")
        for title, dependencies in (("main", target.dependencies), ("test", target.test_dependencies)):
            for entry in dependencies.entries:
                lines.append(f"    {title} {entry.scope}: {render_notation(entry.notation)}")
            if dependencies.custom_configurations:
                lines.append(f"    {title}: {len(dependencies.custom_configurations)} custom action(s)")

    return '\n'.join(lines)


def get_variant_summary(variant: JvmLibraryVariantConfiguration) -> str:
    lines = []
    if variant.description:
        lines.append(f"  Description: {variant.description}")
    lines.append(f"  Publishing: {'Enabled' if variant.publishing else 'Disabled'}")
    lines.append(f"  JDK: {variant.jdk} (Kotlin JVM target {variant.kotlin_jvm_target})")
    if not variant.enforces_same_version_for_all_kotlin_dependencies:
        lines.append("  Mixed Kotlin versions allowed")
    return '\n'.join(lines)


class Show(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to show the merged configuration of each module
        and JVM library variant.

        Examples:
            kmplib show
            kmplib show --module core
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="kmplib show",
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
            "--module",
            action="store",
            default=None,
            help="Only show the module at this path (e.g. core or :core)",
        )
        module_name = os.path.splitext(os.path.basename(__file__))[0]
        input_argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(input_argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if args.project_dir:
            context.project_dir = args.project_dir

        root = self.load_workspace(context).exit_on_failure()

        wanted = None
        if args.module is not None:
            wanted = ":" + args.module.strip(":") if args.module.strip(":") else ":"

        shown = 0
        for project in module_projects(root):
            if wanted is not None and project.path != wanted:
                continue
            print(f"\nModule {project.path}")
            print(get_config_summary(applied_configuration(project)))
            shown += 1
        for project in variant_projects(root):
            if wanted is not None and project.path != wanted:
                continue
            print(f"\nJVM variant {project.path}")
            print(get_variant_summary(applied_variant(project)))
            shown += 1

        if wanted is not None and shown == 0:
            print(f"Error: no module at path '{wanted}'")
            sys.exit(1)
