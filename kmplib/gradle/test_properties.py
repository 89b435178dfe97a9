#!/usr/bin/env python3
"""
Tests for property and credential lookup.

Run with: python3 -m pytest test_properties.py
"""

import os
import tempfile
import unittest

from kmplib.gradle.host import Project
from kmplib.gradle.properties import PropertySource, project_property_source, read_properties_file


def write_file(path, content):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)


class TestReadPropertiesFile(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "gradle.properties")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_parse(self):
        write_file(self.path, "\n".join([
            "# comment",
            "! another comment",
            "",
            "bintrayUser = alice",
            "sonatypeUserName: bob",
            "description=first \\",
            "    second",
            "flag",
            "multi=a\\nb",
        ]) + "\n")

        properties = read_properties_file(self.path)
        self.assertEqual(properties["bintrayUser"], "alice")
        self.assertEqual(properties["sonatypeUserName"], "bob")
        self.assertEqual(properties["description"], "first second")
        self.assertEqual(properties["flag"], "")
        self.assertEqual(properties["multi"], "a\nb")
        self.assertNotIn("# comment", properties)

    def test_continuation_on_last_line(self):
        write_file(self.path, "sonatypePassword=secret\\")

        properties = read_properties_file(self.path)
        self.assertEqual(properties["sonatypePassword"], "secret")

    def test_escaped_separators(self):
        write_file(self.path, "\n".join([
            "key\\=x=value",
            "a\\:b:c",
            "path=C\\:\\\\tools\\\\",
            "after=kept",
        ]) + "\n")

        properties = read_properties_file(self.path)
        self.assertEqual(properties["key=x"], "value")
        self.assertEqual(properties["a:b"], "c")
        # an escaped trailing backslash does not continue the line
        self.assertEqual(properties["path"], "C:\\tools\\")
        self.assertEqual(properties["after"], "kept")
        self.assertNotIn("key", properties)

    def test_missing_file(self):
        self.assertEqual(read_properties_file(self.path), {})
        self.assertEqual(read_properties_file(""), {})


class TestPropertySource(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.project_dir = os.path.join(self.temp_dir.name, "project")
        self.gradle_home = os.path.join(self.temp_dir.name, "gradle-home")
        os.makedirs(self.project_dir)
        os.makedirs(self.gradle_home)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_lookup_order(self):
        write_file(os.path.join(self.project_dir, "gradle.properties"), "key=project\nprojectOnly=p\n")
        write_file(os.path.join(self.gradle_home, "gradle.properties"), "key=home\nhomeOnly=h\n")
        environ = {"ORG_GRADLE_PROJECT_key": "gradle-env", "key": "env"}

        source = PropertySource(
            overrides={"key": "override"},
            project_dir=self.project_dir,
            environ=environ,
            gradle_user_home=self.gradle_home,
        )
        self.assertEqual(source("key"), "override")
        self.assertEqual(source("projectOnly"), "p")
        self.assertEqual(source("homeOnly"), "h")
        self.assertIsNone(source("missing"))

        source = PropertySource(project_dir=self.project_dir, environ=environ, gradle_user_home=self.gradle_home)
        self.assertEqual(source("key"), "gradle-env")

        del environ["ORG_GRADLE_PROJECT_key"]
        self.assertEqual(source("key"), "env")

        del environ["key"]
        self.assertEqual(source("key"), "project")

        source = PropertySource(environ=environ, gradle_user_home=self.gradle_home)
        self.assertEqual(source("key"), "home")

    def test_empty_values_are_missing(self):
        source = PropertySource(overrides={"key": ""}, environ={"key": "env"}, gradle_user_home="")
        self.assertEqual(source.get("key"), "env")

    def test_gradle_user_home_from_environment(self):
        write_file(os.path.join(self.gradle_home, "gradle.properties"), "homeOnly=h\n")
        source = PropertySource(environ={"GRADLE_USER_HOME": self.gradle_home})
        self.assertEqual(source("homeOnly"), "h")

    def test_project_properties_take_precedence(self):
        root = Project("sample", properties={"key": "root", "rootOnly": "r"})
        core = root.child("core")
        core.properties["key"] = "core"

        source = project_property_source(core, environ={"key": "env"})
        self.assertEqual(source("key"), "core")
        self.assertEqual(source("rootOnly"), "r")

        source = project_property_source(core, overrides={"key": "override"}, environ={})
        self.assertEqual(source("key"), "override")
