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
from copier import run_copy
from copier import run_recopy

# import this project modules
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.command import CliCommand


def parse_template_data(items) -> dict:
    """Parse KEY=VALUE pairs, converting true/false to booleans."""
    data = {}
    for item in items or []:
        if "=" not in item:
            print(f"Warning: ignoring template data '{item}', expected KEY=VALUE")
            continue
        key, value = item.split("=", 1)
        if value.lower() == "true":
            value = True
        elif value.lower() == "false":
            value = False
        data[key] = value
    return data


class New(CliCommand):
    def description(self) -> str:
        return """
        Create a new Kotlin Multiplatform library project from a copier template.

        The template receives 'project_name' (the directory name unless
        overridden with --data) and any other --data values. By default the
        command runs non-interactively with the template's default answers.

        Examples:
            kmplib new my-library --template-url https://example.org/template.git
            kmplib new my-library --template-url ./template --vcs-ref v1.2.0
            kmplib new my-library --template-url ./template --data owner=me --interact
        """

    def cli(self) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="kmplib new",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "path", help="Directory path where the new project will be created"
        )
        parser.add_argument(
            "--template-url",
            action="store",
            required=True,
            help="Template repository URL or local path",
        )
        parser.add_argument(
            "--vcs-ref",
            action="store",
            default=None,
            help="Git tag, branch or commit of the template (default: latest tag)",
        )
        parser.add_argument(
            "--data",
            action="append",
            help="Template data in KEY=VALUE format (can be used multiple times)",
        )
        parser.add_argument(
            "--interact",
            action="store_true",
            help="Enable interactive mode with prompts (default is non-interactive)",
        )
        module_name = os.path.splitext(os.path.basename(__file__))[0]
        input_argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(input_argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        print(f"Creating new library project in '{args.path}'...")

        if os.path.exists(args.path):
            print(f"\nDirectory '{args.path}' already exists.")
            response = input("Do you want to update it with the latest template? (y/N): ")
            if response.lower() == "y":
                print("Updating existing project...")
                run_recopy(args.path, unsafe=True, defaults=not args.interact)
                print(f"\nProject '{args.path}' updated successfully!")
                return
            print("Aborted.")
            sys.exit(1)

        data = {"project_name": os.path.basename(os.path.abspath(args.path))}
        data.update(parse_template_data(args.data))

        run_copy(
            args.template_url,
            args.path,
            vcs_ref=args.vcs_ref,
            data=data,
            unsafe=True,
            defaults=not args.interact,
        )

        print(f"\nSuccessfully created new library project: '{args.path}'")
        print("\nNext steps:")
        print(f"  cd {args.path}")
        print("  kmplib check")
        print("  kmplib generate")
