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
Whole-library configuration, applied once to the root project.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from kmplib.errors import ConfigurationError
from kmplib.gradle.host import Project

EXTENSION_NAME = "kmpLibrary"
VERSIONS_PLUGIN = "com.github.ben-manes.versions"

DEFAULT_GRADLE_VERSION = "6.8.3"
DEFAULT_GROUP = "io.github.kmplib"

STANDARD_REPOSITORIES = [
    ("mavenCentral", "https://repo.maven.apache.org/maven2/"),
    ("gradlePluginPortal", "https://plugins.gradle.org/m2/"),
    ("kotlinEap", "https://maven.pkg.jetbrains.space/kotlin/p/kotlin/eap"),
]


@dataclass(frozen=True)
class LibraryExtension:
    """What the root project knows about the library once configured."""
    name: str
    version: str
    group: str
    owner: str
    developer_id: str
    developer_name: str
    developer_email: str
    license_name: str
    license_url: str

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"


class LibraryConfiguration:
    """
    Settable library properties.

    ``name`` and ``version`` have no defaults and must be set by the configure
    action passed to ``apply_library``.
    """

    def __init__(self):
        self.name = ""
        self.version = ""
        self.gradle_version = DEFAULT_GRADLE_VERSION
        self.group = DEFAULT_GROUP
        self.owner = ""
        self.developer_id = ""
        self.developer_name = ""
        self.developer_email = ""
        self.license_name = "Apache License 2.0"
        self.license_url = ""

    def validate(self):
        if not self.name:
            raise ConfigurationError("'name' must be set")
        if not self.version:
            raise ConfigurationError("'version' must be set")

    def to_extension(self) -> LibraryExtension:
        owner = self.owner or self.developer_id or self.name
        return LibraryExtension(
            name=self.name,
            version=self.version,
            group=self.group,
            owner=owner,
            developer_id=self.developer_id or owner,
            developer_name=self.developer_name or owner,
            developer_email=self.developer_email,
            license_name=self.license_name,
            license_url=self.license_url or f"https://github.com/{owner}/{self.name}/blob/master/LICENSE",
        )


def library_extension(project: Project) -> LibraryExtension:
    """Return the library extension of the project's root, failing if it is missing."""
    extension = project.root_project.find_extension(EXTENSION_NAME)
    if extension is None:
        raise ConfigurationError(
            f"kmpLibrary {{}} must be applied to the root project before configuring {project.path}"
        )
    return extension


def apply_library(project: Project,
                  configure: Optional[Callable[[LibraryConfiguration], None]] = None) -> LibraryExtension:
    """
    Configure the root project of a library.

    Raises:
        ConfigurationError: If the project is not the root project, if the
            library was already configured, or if name or version are missing
    """
    if project.parent is not None:
        raise ConfigurationError("kmpLibrary {} must only be used in the root project")
    if project.find_extension(EXTENSION_NAME) is not None:
        raise ConfigurationError("kmpLibrary {} must only be used once")

    configuration = LibraryConfiguration()
    if configure is not None:
        configure(configuration)
    configuration.validate()

    extension = configuration.to_extension()
    _configure_basics(project, configuration, extension)
    return extension


def _configure_basics(project: Project, configuration: LibraryConfiguration, extension: LibraryExtension):
    project.apply_plugin(VERSIONS_PLUGIN)
    project.group = extension.group
    project.version = extension.version

    for name, url in STANDARD_REPOSITORIES:
        project.add_repository(name, url)

    project.register_task(
        "wrapper",
        "Wrapper",
        distributionType="ALL",
        gradleVersion=configuration.gradle_version,
    )

    project.add_extension(EXTENSION_NAME, extension)
