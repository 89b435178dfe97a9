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

"""
Maven publication of library modules and JVM library variants.

Publications and archive tasks are always registered. Upload destinations
(Bintray, Sonatype OSSRH) are only configured when their credentials can be
found; otherwise they are skipped and the configuration still succeeds.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from kmplib.config.module import LibraryModuleConfiguration
from kmplib.gradle.host import MavenPublication, Project, Repository
from kmplib.gradle.library import LibraryExtension

MAVEN_PUBLISH_PLUGIN = "maven-publish"
SIGNING_PLUGIN = "signing"
BINTRAY_PLUGIN = "com.jfrog.bintray"

ROOT_PUBLICATION = "kotlinMultiplatform"
DEFAULT_PUBLICATION = "default"

BINTRAY_USER_KEY = "bintrayUser"
BINTRAY_API_KEY_KEY = "bintrayApiKey"
SONATYPE_USER_KEY = "sonatypeUserName"
SONATYPE_PASSWORD_KEY = "sonatypePassword"

SONATYPE_RELEASE_URL = "https://oss.sonatype.org/service/local/staging/deploy/maven2"
SONATYPE_SNAPSHOT_URL = "https://oss.sonatype.org/content/repositories/snapshots"

Lookup = Callable[[str], Optional[str]]


@dataclass
class BintrayExtension:
    user: str
    key: str
    package_name: str
    version_name: str
    vcs_url: str
    website_url: str
    issue_tracker_url: str
    repo: str = "maven"
    licenses: List[str] = field(default_factory=lambda: ["Apache-2.0"])
    publications: List[str] = field(default_factory=list)
    publish: bool = True
    public_download_numbers: bool = True


def pom_metadata(project: Project, library: LibraryExtension) -> Dict[str, object]:
    return {
        'name': project.name,
        'description': project.description or f"{project.name} library",
        'url': library.url,
        'licenses': [
            {'name': library.license_name, 'url': library.license_url},
        ],
        'developers': [
            {
                'id': library.developer_id,
                'name': library.developer_name,
                'email': library.developer_email,
            },
        ],
        'scm': {
            'connection': f"scm:git:{library.url}.git",
            'developerConnection': f"scm:git:git@github.com:{library.owner}/{library.name}.git",
            'url': library.url,
        },
    }


def configure_publishing(project: Project, library: LibraryExtension,
                         configuration: LibraryModuleConfiguration,
                         properties: Lookup, verbose: bool = False) -> List[str]:
    """
    Register publications for a module and configure upload destinations.

    Returns:
        Names of the upload destinations that were configured
    """
    kotlin = project.kotlin
    _register_archives(
        project,
        sources=[d for s in kotlin.source_sets.values() if s.name.endswith("Main") for d in s.kotlin_dirs],
    )

    pom = pom_metadata(project, library)
    for publication in _create_publications(project, configuration):
        publication.pom = dict(pom)

    return _configure_destinations(project, library, properties, verbose)


def configure_component_publishing(project: Project, library: LibraryExtension, sources: List[str],
                                   properties: Lookup, component: str = "java",
                                   verbose: bool = False) -> List[str]:
    """
    Publish a single-platform project as one ``default`` publication.

    Returns:
        Names of the upload destinations that were configured
    """
    _register_archives(project, sources)

    publication = project.publishing.publication(
        DEFAULT_PUBLICATION,
        group_id=project.group,
        artifact_id=project.name,
        version=project.version,
        component=component,
    )
    publication.artifacts = ["javadocJar", "sourcesJar"]
    publication.pom = pom_metadata(project, library)

    return _configure_destinations(project, library, properties, verbose)


def _register_archives(project: Project, sources: List[str]):
    project.apply_plugin(MAVEN_PUBLISH_PLUGIN)
    project.apply_plugin(SIGNING_PLUGIN)

    project.register_task("javadocJar", "Jar", archiveClassifier="javadoc")
    project.register_task("sourcesJar", "Jar", archiveClassifier="sources", sources=list(sources))


def _configure_destinations(project: Project, library: LibraryExtension,
                            properties: Lookup, verbose: bool) -> List[str]:
    destinations = []
    if configure_bintray_publishing(project, library, properties, verbose=verbose):
        destinations.append("bintray")
    if configure_sonatype_publishing(project, properties, verbose=verbose):
        destinations.append("sonatype")
    return destinations


def _create_publications(project: Project, configuration: LibraryModuleConfiguration) -> List[MavenPublication]:
    kotlin = project.kotlin
    publishing = project.publishing

    def publication(name: str, artifact_id: str, artifacts: List[str]) -> MavenPublication:
        result = publishing.publication(
            name,
            group_id=project.group,
            artifact_id=artifact_id,
            version=project.version,
        )
        result.artifacts = list(artifacts)
        return result

    host_targets = list(kotlin.targets.values())

    if configuration.is_publishing_single_target_as_module:
        # the only target is published under the plain module coordinates
        return [publication(host_targets[0].name, project.name, ["javadocJar", "sourcesJar"])]

    result = [publication(ROOT_PUBLICATION, project.name, ["javadocJar", "sourcesJar"])]
    for target in host_targets:
        result.append(publication(target.name, f"{project.name}-{target.name.lower()}", ["javadocJar"]))
    return result


def configure_bintray_publishing(project: Project, library: LibraryExtension,
                                 properties: Lookup, verbose: bool = False) -> bool:
    user = properties(BINTRAY_USER_KEY)
    key = properties(BINTRAY_API_KEY_KEY)
    if not user or not key:
        missing = BINTRAY_USER_KEY if not user else BINTRAY_API_KEY_KEY
        print(f"Skipping Bintray publishing for {project.path}: '{missing}' is not set")
        return False

    project.apply_plugin(BINTRAY_PLUGIN)
    project.extensions["bintray"] = BintrayExtension(
        user=user,
        key=key,
        package_name=library.name,
        version_name=library.version,
        vcs_url=library.url,
        website_url=library.url,
        issue_tracker_url=f"{library.url}/issues",
        publications=list(project.publishing.publications),
    )

    if verbose:
        print(f"Configured Bintray publishing for {project.path} as {user}")
    return True


def configure_sonatype_publishing(project: Project, properties: Lookup, verbose: bool = False) -> bool:
    user = properties(SONATYPE_USER_KEY)
    password = properties(SONATYPE_PASSWORD_KEY)
    if not user or not password:
        missing = SONATYPE_USER_KEY if not user else SONATYPE_PASSWORD_KEY
        print(f"Skipping Sonatype publishing for {project.path}: '{missing}' is not set")
        return False

    for publication in project.publishing.publications.values():
        project.signing.sign(publication)

    url = SONATYPE_SNAPSHOT_URL if str(project.version).endswith("-SNAPSHOT") else SONATYPE_RELEASE_URL
    if all(r.name != "sonatype" for r in project.publishing.repositories):
        project.publishing.repositories.append(Repository(
            name="sonatype",
            url=url,
            credentials={'username': user, 'password': password},
            credential_keys={'username': SONATYPE_USER_KEY, 'password': SONATYPE_PASSWORD_KEY},
        ))

    if verbose:
        print(f"Configured Sonatype publishing for {project.path}: {url}")
    return True
