#!/usr/bin/env python3
"""
Tests for the command line subcommands.

Run with: python3 -m pytest test_commands.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from kmplib.commands.check import Check
from kmplib.commands.generate import Generate, project_output_dir, write_file
from kmplib.commands.new import parse_template_data
from kmplib.commands.show import Show, get_config_summary
from kmplib.config.module import LibraryModuleConfigurationBuilder
from kmplib.utils.context.context import CliContext
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.result import CliResult
from kmplib.errors import ConfigurationError

SAMPLE_CONFIG = """
[library]
name = "sample"
version = "1.0.0"
owner = "example"

[[module]]
path = "core"
description = "Core types"

[module.targets.jvm]
jdk = "11"

[[module]]
path = "extras"
publishing = false
"""

VARIANT_CONFIG = SAMPLE_CONFIG + """
[[jvm_variant]]
path = "core-jdk7"
description = "Core types for JDK 7"
"""

CLEAN_ENVIRON = {"GRADLE_USER_HOME": ""}


class CommandTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.project_dir = self.temp_dir.name
        self.context = CliContext(project_dir=self.project_dir)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_config(self, content=SAMPLE_CONFIG):
        with open(os.path.join(self.project_dir, "KMPLIB.toml"), 'w', encoding='utf-8') as f:
            f.write(content)

    def run_command(self, command, **kwargs):
        with patch.dict(os.environ, CLEAN_ENVIRON, clear=True), patch("builtins.print") as mock_print:
            command.exec(self.context, CliNameSpace(**kwargs))
        return "\n".join(" ".join(str(arg) for arg in call.args) for call in mock_print.call_args_list)


class TestCliResult(unittest.TestCase):

    def test_capture(self):
        self.assertEqual(CliResult.capture(lambda: 42).get_value(), 42)

        def fail():
            raise ConfigurationError("'name' must be set")

        result = CliResult.capture(fail)
        self.assertTrue(result.is_failure())
        self.assertEqual(result.get_error(), "'name' must be set")
        self.assertIsNone(result.get_value())

    def test_exit_on_failure(self):
        self.assertEqual(CliResult(value="root").exit_on_failure(), "root")
        with patch("builtins.print"), self.assertRaises(SystemExit) as cm:
            CliResult(error="broken").exit_on_failure(code=2)
        self.assertEqual(cm.exception.code, 2)


class TestCheck(CommandTestCase):

    def test_valid(self):
        self.write_config()
        output = self.run_command(Check(), project_dir=None, verbose=False)
        self.assertIn("Library 'sample' 1.0.0 is valid (2 module(s))", output)
        self.assertIn(":core: common, jvm (published)", output)
        self.assertIn(":extras: common (not published)", output)

    def test_jvm_variant(self):
        self.write_config(VARIANT_CONFIG)
        output = self.run_command(Check(), project_dir=None, verbose=False)
        self.assertIn(":core-jdk7: JVM variant, jdk 1.7 (published)", output)

    def test_invalid(self):
        self.write_config('[library]\nname = "sample"\n')
        with self.assertRaises(SystemExit) as cm:
            self.run_command(Check(), project_dir=None, verbose=False)
        self.assertEqual(cm.exception.code, 1)


class TestShow(CommandTestCase):

    def test_summary(self):
        builder = LibraryModuleConfigurationBuilder(description="Core types")
        builder.language(lambda language: language.without_explicit_api())
        builder.targets(lambda targets: targets.jvm(lambda jvm: jvm.dependencies(
            lambda d: d.api(d.kotlin("reflect"))
        )))
        summary = get_config_summary(builder.build())

        self.assertIn("Description: Core types", summary)
        self.assertIn("Explicit API: off", summary)
        self.assertIn("Target jvm", summary)
        self.assertIn('main api: kotlin("reflect")', summary)

    def test_single_module(self):
        self.write_config()
        output = self.run_command(Show(), project_dir=None, module="core")
        self.assertIn("Module :core", output)
        self.assertIn("Target jvm (jdk 11)", output)
        self.assertNotIn("Module :extras", output)

    def test_jvm_variant(self):
        self.write_config(VARIANT_CONFIG)
        output = self.run_command(Show(), project_dir=None, module="core-jdk7")
        self.assertIn("JVM variant :core-jdk7", output)
        self.assertIn("Description: Core types for JDK 7", output)
        self.assertIn("JDK: 1.7 (Kotlin JVM target 1.6)", output)
        self.assertNotIn("Module :core", output)

    def test_unknown_module(self):
        self.write_config()
        with self.assertRaises(SystemExit):
            self.run_command(Show(), project_dir=None, module="missing")


class TestGenerate(CommandTestCase):

    def test_generate(self):
        self.write_config()
        output_dir = os.path.join(self.project_dir, "out")
        self.run_command(Generate(), project_dir=None, output=output_dir, no_backup=False, verbose=False)

        for path in ("settings.gradle.kts", "gradle.properties", "build.gradle.kts",
                     os.path.join("core", "build.gradle.kts"), os.path.join("extras", "build.gradle.kts")):
            self.assertTrue(os.path.isfile(os.path.join(output_dir, path)), path)

        with open(os.path.join(output_dir, "core", "build.gradle.kts"), encoding='utf-8') as f:
            self.assertIn('kotlinOptions.jvmTarget = "11"', f.read())

    def test_generate_jvm_variant(self):
        self.write_config(VARIANT_CONFIG)
        output_dir = os.path.join(self.project_dir, "out")
        output = self.run_command(Generate(), project_dir=None, output=output_dir, no_backup=False, verbose=False)

        self.assertIn("Generated build files for 4 project(s)", output)
        with open(os.path.join(output_dir, "core-jdk7", "build.gradle.kts"), encoding='utf-8') as f:
            script = f.read()
        self.assertIn("tasks.withType<KotlinCompile>", script)
        self.assertIn('create<MavenPublication>("default")', script)
        with open(os.path.join(output_dir, "settings.gradle.kts"), encoding='utf-8') as f:
            self.assertIn('":core-jdk7"', f.read())

    def test_project_output_dir(self):
        self.assertEqual(project_output_dir("out", ":"), "out")
        self.assertEqual(project_output_dir("out", ":core:api"), os.path.join("out", "core", "api"))

    def test_write_file_keeps_backup(self):
        path = os.path.join(self.project_dir, "build.gradle.kts")
        with patch("builtins.print"):
            write_file(path, "first\n")
            write_file(path, "first\n")
            self.assertFalse(os.path.exists(path + ".backup"))
            write_file(path, "second\n")

        with open(path + ".backup", encoding='utf-8') as f:
            self.assertEqual(f.read(), "first\n")
        with open(path, encoding='utf-8') as f:
            self.assertEqual(f.read(), "second\n")

    def test_write_file_without_backup(self):
        path = os.path.join(self.project_dir, "gradle.properties")
        with patch("builtins.print"):
            write_file(path, "a=1\n")
            write_file(path, "a=2\n", backup=False)
        self.assertFalse(os.path.exists(path + ".backup"))


class TestNew(unittest.TestCase):

    def test_parse_template_data(self):
        with patch("builtins.print"):
            data = parse_template_data(["owner=me", "publish=true", "kapt=False", "broken", "url=a=b"])
        self.assertEqual(data, {"owner": "me", "publish": True, "kapt": False, "url": "a=b"})
        self.assertEqual(parse_template_data(None), {})
