#!/usr/bin/env python3
"""
Tests for standalone JVM library variants.

Run with: python3 -m pytest test_jvm_variant.py
"""

import unittest
from unittest.mock import patch

from kmplib.errors import ConfigurationError
from kmplib.gradle.host import PlatformDependency, Project
from kmplib.gradle.jvm_variant import (
    CONTRACTS_ARG,
    JAVA_LIBRARY_PLUGIN,
    KAPT_GENERATED_SOURCES,
    KOTLIN_JVM_PLUGIN,
    apply_jvm_library_variant,
    applied_variant,
    variant_projects,
)
from kmplib.gradle.library import apply_library
from kmplib.gradle.module import SAME_VERSION_REASON, apply_library_module
from kmplib.gradle.publishing import BINTRAY_PLUGIN, DEFAULT_PUBLICATION, MAVEN_PUBLISH_PLUGIN, SONATYPE_RELEASE_URL
from kmplib.gradle.render import render_build_script

CREDENTIALS = {
    "bintrayUser": "alice",
    "bintrayApiKey": "bintray-secret",
    "sonatypeUserName": "bob",
    "sonatypePassword": "sonatype-secret",
}


def no_properties(key):
    return None


def library_root():
    root = Project("sample")

    def configure(library):
        library.name = "sample"
        library.version = "1.0.0"
        library.owner = "example"

    apply_library(root, configure)
    return root


class VariantTestCase(unittest.TestCase):

    def setUp(self):
        self.root = library_root()
        self.project = self.root.child("core-jdk7")

    def apply(self, configure=None, **kwargs):
        kwargs.setdefault("properties", CREDENTIALS.get)
        with patch("builtins.print"):
            return apply_jvm_library_variant(self.project, configure, **kwargs)


class TestBasics(VariantTestCase):

    def test_defaults(self):
        variant = self.apply()
        jvm = self.project.kotlin_jvm

        self.assertEqual(variant.jdk, "1.7")
        self.assertIs(applied_variant(self.project), variant)
        self.assertEqual(self.project.plugins[:2], [KOTLIN_JVM_PLUGIN, JAVA_LIBRARY_PLUGIN])
        self.assertIsNone(self.project.kotlin)
        self.assertEqual(self.project.group, self.root.group)
        self.assertEqual(self.project.version, "1.0.0")

        self.assertEqual(jvm.source_compatibility, "1.7")
        self.assertEqual(jvm.target_compatibility, "1.7")
        self.assertEqual(jvm.jvm_target, "1.6")
        self.assertEqual(jvm.free_compiler_args, [CONTRACTS_ARG])
        self.assertEqual(jvm.source_sets["main"].kotlin_dirs, ["sources"])
        self.assertEqual(jvm.source_sets["main"].resource_dirs, ["resources"])
        self.assertEqual(jvm.source_sets["test"].kotlin_dirs, ["tests/sources"])
        self.assertEqual(jvm.source_sets["test"].resource_dirs, ["tests/resources"])

    def test_standard_dependencies(self):
        self.apply()
        dependencies = self.project.dependencies

        self.assertTrue(all(d.source_set is None and d.configuration == "api" for d in dependencies))
        self.assertIsInstance(dependencies[0].notation, PlatformDependency)
        self.assertEqual(dependencies[0].notation.notation.simple_module_name, "bom")
        self.assertEqual(dependencies[1].notation.simple_module_name, "stdlib-jdk7")

    def test_jdk_levels(self):
        def configure(variant):
            variant.jdk = "1.8"
            variant.description = "JDK 8 build"

        self.apply(configure)
        self.assertEqual(self.project.kotlin_jvm.jvm_target, "1.8")
        self.assertEqual(self.project.dependencies[1].notation.simple_module_name, "stdlib-jdk8")
        self.assertEqual(self.project.description, "JDK 8 build")

        other = self.root.child("core-jdk6")
        with patch("builtins.print"):
            apply_jvm_library_variant(other, lambda variant: setattr(variant, "jdk", "1.6"),
                                      properties=no_properties)
        self.assertEqual(other.dependencies[1].notation.simple_module_name, "stdlib")
        self.assertEqual(other.kotlin_jvm.jvm_target, "1.6")

    def test_invalid_jdk_leaves_project_untouched(self):
        with self.assertRaises(ConfigurationError):
            self.apply(lambda variant: setattr(variant, "jdk", "1.5"))

        self.assertEqual(self.project.plugins, [])
        self.assertIsNone(self.project.kotlin_jvm)
        self.assertIsNone(applied_variant(self.project))

    def test_same_kotlin_version_rule(self):
        self.apply()
        rules = self.project.resolution_rules

        self.assertEqual(len(rules), 1)
        self.assertIsNone(rules[0].configuration_prefix)
        self.assertEqual(rules[0].reason, SAME_VERSION_REASON)
        self.assertTrue(rules[0].matches("compileClasspath"))

    def test_without_same_kotlin_version_rule(self):
        self.apply(lambda variant: setattr(variant, "enforces_same_version_for_all_kotlin_dependencies", False))
        self.assertEqual(self.project.resolution_rules, [])


class TestApplication(VariantTestCase):

    def test_requires_library(self):
        with self.assertRaises(ConfigurationError):
            apply_jvm_library_variant(Project("orphan"))

    def test_only_once_per_project(self):
        self.apply()
        with self.assertRaises(ConfigurationError):
            self.apply()

    def test_not_combined_with_module(self):
        with patch("builtins.print"):
            apply_library_module(self.project, properties=no_properties)
        with self.assertRaises(ConfigurationError):
            self.apply()

        other = self.root.child("legacy")
        with patch("builtins.print"):
            apply_jvm_library_variant(other, properties=no_properties)
            with self.assertRaises(ConfigurationError):
                apply_library_module(other, properties=no_properties)

    def test_variant_projects(self):
        self.apply()
        with patch("builtins.print"):
            apply_library_module(self.root.child("core"), properties=no_properties)
        self.assertEqual(variant_projects(self.root), [self.project])


class TestPublishing(VariantTestCase):

    def test_default_publication(self):
        self.apply()
        publications = self.project.publishing.publications

        self.assertEqual(list(publications), [DEFAULT_PUBLICATION])
        publication = publications[DEFAULT_PUBLICATION]
        self.assertEqual(publication.component, "java")
        self.assertEqual(publication.artifact_id, "core-jdk7")
        self.assertEqual(publication.version, "1.0.0")
        self.assertEqual(publication.artifacts, ["javadocJar", "sourcesJar"])
        self.assertEqual(publication.pom["url"], "https://github.com/example/sample")
        self.assertEqual(
            self.project.tasks["sourcesJar"].properties["sources"],
            ["sources", KAPT_GENERATED_SOURCES],
        )

    def test_destinations(self):
        self.apply()

        self.assertIn(MAVEN_PUBLISH_PLUGIN, self.project.plugins)
        self.assertIn(BINTRAY_PLUGIN, self.project.plugins)
        self.assertEqual(self.project.extensions["bintray"].publications, [DEFAULT_PUBLICATION])
        self.assertEqual(self.project.signing.signed_publications, [DEFAULT_PUBLICATION])
        self.assertEqual(self.project.publishing.repositories[0].url, SONATYPE_RELEASE_URL)

    def test_missing_credentials_skip_destinations(self):
        with patch("builtins.print") as mock_print:
            apply_jvm_library_variant(self.project, properties=no_properties)
        messages = [str(call.args[0]) for call in mock_print.call_args_list]

        self.assertIn(DEFAULT_PUBLICATION, self.project.publishing.publications)
        self.assertNotIn(BINTRAY_PLUGIN, self.project.plugins)
        self.assertEqual(self.project.publishing.repositories, [])
        self.assertTrue(any(m.startswith("Skipping Bintray publishing for :core-jdk7") for m in messages))
        self.assertTrue(any(m.startswith("Skipping Sonatype publishing for :core-jdk7") for m in messages))

    def test_publishing_disabled(self):
        self.apply(lambda variant: setattr(variant, "publishing", False))
        self.assertEqual(self.project.publishing.publications, {})
        self.assertNotIn(MAVEN_PUBLISH_PLUGIN, self.project.plugins)
        self.assertEqual(self.project.tasks, {})


class TestRender(VariantTestCase):

    def test_build_script(self):
        self.apply(lambda variant: setattr(variant, "description", "JDK 7 build"))
        script = render_build_script(self.project)

        self.assertTrue(script.startswith("import org.jetbrains.kotlin.gradle.tasks.KotlinCompile\n"))
        self.assertIn('id("org.jetbrains.kotlin.jvm") version "1.4.32"', script)
        self.assertIn("`java-library`", script)
        self.assertIn('description = "JDK 7 build"', script)
        self.assertIn('sourceCompatibility = JavaVersion.toVersion("1.7")', script)
        self.assertIn('getByName("main") {', script)
        self.assertIn('kotlin.setSrcDirs(listOf("tests/sources"))', script)
        self.assertIn("tasks.withType<KotlinCompile> {", script)
        self.assertIn('kotlinOptions.jvmTarget = "1.6"', script)
        self.assertIn(f'kotlinOptions.freeCompilerArgs = listOf("{CONTRACTS_ARG}")', script)
        self.assertIn('"api"(kotlin("stdlib-jdk7"))', script)
        self.assertIn("configurations.all {", script)
        self.assertIn('create<MavenPublication>("default") {', script)
        self.assertIn('from(components["java"])', script)
        self.assertNotIn("kotlin {", script)
        self.assertNotIn("onlyIf", script)
        for secret in CREDENTIALS.values():
            self.assertNotIn(secret, script)


if __name__ == "__main__":
    unittest.main()
