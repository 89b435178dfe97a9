#!/usr/bin/env python3
"""
Tests for module publishing.

Run with: python3 -m pytest test_publishing.py
"""

import unittest
from unittest.mock import patch

from kmplib.errors import ConfigurationError
from kmplib.gradle.host import Project
from kmplib.gradle.library import apply_library
from kmplib.gradle.module import apply_library_module
from kmplib.gradle.publishing import (
    BINTRAY_PLUGIN,
    MAVEN_PUBLISH_PLUGIN,
    ROOT_PUBLICATION,
    SONATYPE_RELEASE_URL,
    SONATYPE_SNAPSHOT_URL,
)

CREDENTIALS = {
    "bintrayUser": "alice",
    "bintrayApiKey": "bintray-secret",
    "sonatypeUserName": "bob",
    "sonatypePassword": "sonatype-secret",
}


def library_root(version="1.0.0"):
    root = Project("sample")

    def configure(library):
        library.name = "sample"
        library.version = version
        library.owner = "example"

    apply_library(root, configure)
    return root


def jvm_and_js(module):
    module.targets(lambda targets: targets.jvm())
    module.targets(lambda targets: targets.js())


class TestPublications(unittest.TestCase):

    def setUp(self):
        self.root = library_root()
        self.project = self.root.child("core")

    def apply(self, configure, properties=None):
        with patch("builtins.print"):
            apply_library_module(self.project, configure, properties=properties or CREDENTIALS.get)

    def test_publication_per_target(self):
        self.apply(jvm_and_js)
        publications = self.project.publishing.publications

        self.assertEqual(list(publications), [ROOT_PUBLICATION, "jvm", "js"])
        self.assertEqual(publications[ROOT_PUBLICATION].artifact_id, "core")
        self.assertEqual(publications["jvm"].artifact_id, "core-jvm")
        self.assertEqual(publications["js"].artifact_id, "core-js")
        for publication in publications.values():
            self.assertEqual(publication.group_id, self.root.group)
            self.assertEqual(publication.version, "1.0.0")
            self.assertEqual(publication.pom["url"], "https://github.com/example/sample")
            self.assertIn("javadocJar", publication.artifacts)

        self.assertIn(MAVEN_PUBLISH_PLUGIN, self.project.plugins)
        self.assertEqual(self.project.tasks["javadocJar"].properties["archiveClassifier"], "javadoc")
        self.assertEqual(
            self.project.tasks["sourcesJar"].properties["sources"],
            ["sources/common", "sources/jvm", "sources/js"],
        )

    def test_single_target_as_module(self):
        def configure(module):
            module.targets(lambda targets: targets.jvm())
            module.publish_single_target_as_module()

        self.apply(configure)
        publications = self.project.publishing.publications
        self.assertEqual(list(publications), ["jvm"])
        self.assertEqual(publications["jvm"].artifact_id, "core")

    def test_single_target_as_module_needs_one_target(self):
        def configure(module):
            jvm_and_js(module)
            module.publish_single_target_as_module()

        with self.assertRaises(ConfigurationError):
            self.apply(configure)

        self.assertIsNone(self.project.kotlin)
        self.assertEqual(self.project.plugins, [])
        self.assertEqual(self.project.dependencies, [])
        self.assertEqual(self.project.tasks, {})
        self.assertEqual(self.project.publishing.publications, {})

        self.apply(jvm_and_js)
        self.assertEqual(list(self.project.publishing.publications), [ROOT_PUBLICATION, "jvm", "js"])


class TestDestinations(unittest.TestCase):

    def apply(self, root, properties):
        project = root.child("core")
        with patch("builtins.print") as mock_print:
            apply_library_module(project, jvm_and_js, properties=properties)
        return project, [str(call.args[0]) for call in mock_print.call_args_list]

    def test_missing_credentials_skip_destinations(self):
        project, output = self.apply(library_root(), lambda key: None)

        self.assertNotIn(BINTRAY_PLUGIN, project.plugins)
        self.assertNotIn("bintray", project.extensions)
        self.assertEqual(project.publishing.repositories, [])
        self.assertEqual(project.signing.signed_publications, [])
        self.assertEqual(len(project.publishing.publications), 3)
        self.assertTrue(any("Skipping Bintray" in line and "bintrayUser" in line for line in output))
        self.assertTrue(any("Skipping Sonatype" in line and "sonatypeUserName" in line for line in output))

    def test_partial_credentials_skip_destination(self):
        properties = {"bintrayUser": "alice", "sonatypeUserName": "bob"}
        project, output = self.apply(library_root(), properties.get)

        self.assertNotIn("bintray", project.extensions)
        self.assertTrue(any("'bintrayApiKey' is not set" in line for line in output))
        self.assertTrue(any("'sonatypePassword' is not set" in line for line in output))

    def test_bintray(self):
        project, _ = self.apply(library_root(), CREDENTIALS.get)

        self.assertIn(BINTRAY_PLUGIN, project.plugins)
        bintray = project.extensions["bintray"]
        self.assertEqual(bintray.user, "alice")
        self.assertEqual(bintray.key, "bintray-secret")
        self.assertEqual(bintray.package_name, "sample")
        self.assertEqual(bintray.version_name, "1.0.0")
        self.assertEqual(bintray.issue_tracker_url, "https://github.com/example/sample/issues")
        self.assertEqual(bintray.publications, [ROOT_PUBLICATION, "jvm", "js"])

    def test_sonatype(self):
        project, _ = self.apply(library_root(), CREDENTIALS.get)

        self.assertEqual(project.signing.signed_publications, [ROOT_PUBLICATION, "jvm", "js"])
        repository = project.publishing.repositories[0]
        self.assertEqual(repository.name, "sonatype")
        self.assertEqual(repository.url, SONATYPE_RELEASE_URL)
        self.assertEqual(repository.credentials, {"username": "bob", "password": "sonatype-secret"})

    def test_sonatype_snapshot(self):
        project, _ = self.apply(library_root("1.1.0-SNAPSHOT"), CREDENTIALS.get)
        self.assertEqual(project.publishing.repositories[0].url, SONATYPE_SNAPSHOT_URL)
