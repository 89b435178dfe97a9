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
Dependency declarations of a target.

A ``Dependencies`` value is an ordered list of declarations plus custom actions
that are replayed on the build host's dependency handler. Notations are kept
as declared; resolving them is up to the build host.
"""

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, List, Optional, Tuple, Union

from kmplib.config.merge import concat
from kmplib.errors import ConfigurationError

API = "api"
IMPLEMENTATION = "implementation"
COMPILE_ONLY = "compileOnly"
RUNTIME_ONLY = "runtimeOnly"
ANNOTATION_PROCESSOR = "annotationProcessor"

SCOPES = (API, IMPLEMENTATION, COMPILE_ONLY, RUNTIME_ONLY, ANNOTATION_PROCESSOR)

KOTLIN_GROUP = "org.jetbrains.kotlin"
KOTLINX_GROUP = "org.jetbrains.kotlinx"


@dataclass(frozen=True)
class KotlinDependency:
    """Module of the Kotlin standard distribution, e.g. ``kotlin("reflect")``."""
    simple_module_name: str
    version: Optional[str] = None

    def coordinates(self) -> str:
        notation = f"{KOTLIN_GROUP}:kotlin-{self.simple_module_name}"
        if self.version:
            notation += f":{self.version}"
        return notation


@dataclass(frozen=True)
class ProjectDependency:
    """Reference to a sibling project in the same build."""
    path: str
    configuration: Optional[str] = None


Notation = Union[str, KotlinDependency, ProjectDependency]


@dataclass(frozen=True)
class DependencyEntry:
    notation: Notation
    scope: str = IMPLEMENTATION
    # replayed on the declared dependency (exclusions, capabilities, ...)
    configure: Optional[Callable[[Any], None]] = None

    def __post_init__(self):
        if self.scope not in SCOPES:
            raise ConfigurationError(
                f"Invalid dependency scope: {self.scope}. Must be one of {list(SCOPES)}"
            )
        if isinstance(self.notation, str) and not self.notation.strip():
            raise ConfigurationError("dependency notation must not be empty")


@dataclass(frozen=True)
class Dependencies:
    entries: Tuple[DependencyEntry, ...] = ()
    custom_configurations: Tuple[Callable[[Any], None], ...] = ()

    DEFAULT: ClassVar["Dependencies"]

    def merge_with(self, other: "Dependencies") -> "Dependencies":
        return Dependencies(
            entries=concat(self.entries, other.entries),
            custom_configurations=concat(self.custom_configurations, other.custom_configurations),
        )

    def by_scope(self, scope: str) -> List[DependencyEntry]:
        return [entry for entry in self.entries if entry.scope == scope]

    def is_empty(self) -> bool:
        return not self.entries and not self.custom_configurations


Dependencies.DEFAULT = Dependencies()


class DependenciesBuilder:
    """Collect dependency declarations in the order they are made."""

    def __init__(self):
        self._entries: List[DependencyEntry] = []
        self._custom_configurations: List[Callable[[Any], None]] = []

    def build(self) -> Dependencies:
        return Dependencies(
            entries=tuple(self._entries),
            custom_configurations=tuple(self._custom_configurations),
        )

    def _add(self, scope: str, notation: Notation, configure=None):
        self._entries.append(DependencyEntry(notation=notation, scope=scope, configure=configure))

    def api(self, notation: Notation, configure: Optional[Callable[[Any], None]] = None):
        self._add(API, notation, configure)

    def implementation(self, notation: Notation, configure: Optional[Callable[[Any], None]] = None):
        self._add(IMPLEMENTATION, notation, configure)

    def compile_only(self, notation: Notation, configure: Optional[Callable[[Any], None]] = None):
        self._add(COMPILE_ONLY, notation, configure)

    def runtime_only(self, notation: Notation, configure: Optional[Callable[[Any], None]] = None):
        self._add(RUNTIME_ONLY, notation, configure)

    def kapt(self, notation: Notation, configure: Optional[Callable[[Any], None]] = None):
        self._add(ANNOTATION_PROCESSOR, notation, configure)

    def custom(self, configure: Callable[[Any], None]):
        self._custom_configurations.append(configure)

    @staticmethod
    def kotlin(simple_module_name: str, version: Optional[str] = None) -> KotlinDependency:
        return KotlinDependency(simple_module_name=simple_module_name, version=version)

    @staticmethod
    def kotlinx(simple_module_name: str, version: str, use_prefix: bool = True) -> str:
        if use_prefix:
            return f"{KOTLINX_GROUP}:kotlinx-{simple_module_name}:{version}"
        return f"{KOTLINX_GROUP}:{simple_module_name}:{version}"

    @staticmethod
    def project(path: str, configuration: Optional[str] = None) -> ProjectDependency:
        return ProjectDependency(path=path, configuration=configuration)
