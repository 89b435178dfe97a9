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
In-memory model of the Gradle build a library is configured into.

Nothing here runs Gradle. Each object records the instructions it receives
(plugins, dependencies, source directories, tasks, publications, ...) so that
they can be rendered into build scripts or inspected by tests. Custom actions
recorded in a module configuration receive these objects.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from kmplib.config.dependencies import KotlinDependency, ProjectDependency

DEFAULT_KOTLIN_VERSION = "1.4.32"
KOTLIN_JVM_EXTENSION_NAME = "kotlinJvm"


@dataclass(frozen=True)
class PlatformDependency:
    """Bill of materials, rendered as ``platform(...)``."""
    notation: Union[str, KotlinDependency]


@dataclass
class DeclaredDependency:
    configuration: str
    notation: Any
    source_set: Optional[str] = None
    excludes: List[Dict[str, str]] = field(default_factory=list)
    reason: Optional[str] = None

    def exclude(self, group: Optional[str] = None, module: Optional[str] = None):
        rule = {}
        if group:
            rule['group'] = group
        if module:
            rule['module'] = module
        self.excludes.append(rule)

    def because(self, reason: str):
        self.reason = reason


class DependencyHandler:
    """Dependency declarations of a project or of one Kotlin source set."""

    def __init__(self, project: "Project", source_set: Optional[str] = None):
        self.project = project
        self.source_set = source_set

    def add(self, configuration: str, notation: Any,
            configure: Optional[Callable[[DeclaredDependency], None]] = None) -> DeclaredDependency:
        dependency = DeclaredDependency(
            configuration=configuration,
            notation=notation,
            source_set=self.source_set,
        )
        if configure is not None:
            configure(dependency)
        self.project.dependencies.append(dependency)
        return dependency

    def api(self, notation, configure=None):
        return self.add("api", notation, configure)

    def implementation(self, notation, configure=None):
        return self.add("implementation", notation, configure)

    def compile_only(self, notation, configure=None):
        return self.add("compileOnly", notation, configure)

    def runtime_only(self, notation, configure=None):
        return self.add("runtimeOnly", notation, configure)

    @staticmethod
    def kotlin(simple_module_name: str, version: Optional[str] = None) -> KotlinDependency:
        return KotlinDependency(simple_module_name=simple_module_name, version=version)

    @staticmethod
    def platform(notation) -> PlatformDependency:
        return PlatformDependency(notation=notation)

    @staticmethod
    def project(path: str, configuration: Optional[str] = None) -> ProjectDependency:
        return ProjectDependency(path=path, configuration=configuration)

    def declared(self) -> List[DeclaredDependency]:
        return [d for d in self.project.dependencies if d.source_set == self.source_set]


class LanguageSettingsHandler:
    def __init__(self):
        self.opt_ins: List[str] = []
        self.language_features: List[str] = []
        self.progressive_mode = False

    def use_experimental_annotation(self, name: str):
        if name not in self.opt_ins:
            self.opt_ins.append(name)

    def enable_language_feature(self, name: str):
        if name not in self.language_features:
            self.language_features.append(name)


class KotlinSourceSet:
    def __init__(self, project: "Project", name: str):
        self.name = name
        self.depends_on: List[str] = []
        self.kotlin_dirs: List[str] = []
        self.resource_dirs: List[str] = []
        self.language_settings = LanguageSettingsHandler()
        self.dependencies = DependencyHandler(project, source_set=name)


class KotlinTarget:
    """
    One Kotlin compilation target.

    ``platform`` is the Gradle preset name (jvm, js, iosArm64, ...) and
    ``attributes`` holds the switches the DSL would set on it.
    """

    def __init__(self, name: str, platform: str):
        self.name = name
        self.platform = platform
        self.attributes: Dict[str, Any] = {}
        self.free_compiler_args: List[str] = []


class KotlinMultiplatformExtension:

    def __init__(self, project: "Project"):
        self.project = project
        self.targets: Dict[str, KotlinTarget] = {}
        self.source_sets: Dict[str, KotlinSourceSet] = {}
        self.explicit_api: Optional[str] = None
        self.free_compiler_args: List[str] = []

    def target(self, name: str, platform: Optional[str] = None) -> KotlinTarget:
        if name not in self.targets:
            self.targets[name] = KotlinTarget(name, platform or name)
        return self.targets[name]

    def source_set(self, name: str) -> KotlinSourceSet:
        if name not in self.source_sets:
            self.source_sets[name] = KotlinSourceSet(self.project, name)
        return self.source_sets[name]

    def add_compiler_arg(self, arg: str):
        if arg not in self.free_compiler_args:
            self.free_compiler_args.append(arg)


class KotlinJvmExtension:
    """
    A plain Kotlin/JVM project: ``java {}`` compatibility, the ``main`` and
    ``test`` source sets and the settings of every ``KotlinCompile`` task.
    """

    def __init__(self, project: "Project"):
        self.project = project
        self.source_compatibility: Optional[str] = None
        self.target_compatibility: Optional[str] = None
        self.jvm_target: Optional[str] = None
        self.free_compiler_args: List[str] = []
        self.source_sets: Dict[str, KotlinSourceSet] = {}

    def source_set(self, name: str) -> KotlinSourceSet:
        if name not in self.source_sets:
            self.source_sets[name] = KotlinSourceSet(self.project, name)
        return self.source_sets[name]


@dataclass
class Repository:
    name: str
    url: str
    credentials: Optional[Dict[str, str]] = None
    # property keys the credentials were read from
    credential_keys: Optional[Dict[str, str]] = None


@dataclass
class ResolutionRule:
    group: str
    version: str
    reason: str
    # configurations whose name starts with this prefix, all when None
    configuration_prefix: Optional[str] = None
    # longer prefixes owned by other targets, e.g. jvmJdk7 for jvm
    excluded_prefixes: List[str] = field(default_factory=list)

    def matches(self, configuration_name: str) -> bool:
        if self.configuration_prefix is None:
            return True
        if not configuration_name.startswith(self.configuration_prefix):
            return False
        return not any(configuration_name.startswith(p) for p in self.excluded_prefixes)


@dataclass
class Task:
    name: str
    type: str
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MavenPublication:
    name: str
    group_id: str
    artifact_id: str
    version: str
    artifacts: List[str] = field(default_factory=list)
    pom: Dict[str, Any] = field(default_factory=dict)
    # software component the publication is built from, e.g. java
    component: Optional[str] = None


class PublishingExtension:
    def __init__(self):
        self.publications: Dict[str, MavenPublication] = {}
        self.repositories: List[Repository] = []

    def publication(self, name: str, **kwargs) -> MavenPublication:
        if name not in self.publications:
            self.publications[name] = MavenPublication(name=name, **kwargs)
        return self.publications[name]


class SigningExtension:
    def __init__(self):
        self.signed_publications: List[str] = []

    def sign(self, publication: MavenPublication):
        if publication.name not in self.signed_publications:
            self.signed_publications.append(publication.name)


class Project:
    """
    A Gradle project.

    Args:
        name: Project name
        parent: Parent project, None for the root project
        project_dir: Directory of the project, used for gradle.properties lookup
        properties: Project properties (what ``-Pkey=value`` sets in Gradle)
    """

    def __init__(self, name: str, parent: Optional["Project"] = None,
                 project_dir: Optional[str] = None,
                 properties: Optional[Dict[str, str]] = None):
        self.name = name
        self.parent = parent
        self.project_dir = project_dir
        self.properties: Dict[str, str] = dict(properties or {})
        self.children: Dict[str, "Project"] = {}

        self.description: Optional[str] = None
        self.group: Optional[str] = None
        self.version: Optional[str] = None
        self.kotlin_version = parent.kotlin_version if parent else DEFAULT_KOTLIN_VERSION

        self.extensions: Dict[str, Any] = {}
        self.plugins: List[str] = []
        self.repositories: List[Repository] = []
        self.dependencies: List[DeclaredDependency] = []
        self.resolution_rules: List[ResolutionRule] = []
        self.tasks: Dict[str, Task] = {}
        self.publishing = PublishingExtension()
        self.signing = SigningExtension()

    @property
    def path(self) -> str:
        if self.parent is None:
            return ":"
        if self.parent.parent is None:
            return f":{self.name}"
        return f"{self.parent.path}:{self.name}"

    @property
    def root_project(self) -> "Project":
        project = self
        while project.parent is not None:
            project = project.parent
        return project

    def child(self, name: str, project_dir: Optional[str] = None) -> "Project":
        if name not in self.children:
            self.children[name] = Project(name, parent=self, project_dir=project_dir)
        return self.children[name]

    def all_projects(self) -> List["Project"]:
        result = [self]
        for child in self.children.values():
            result.extend(child.all_projects())
        return result

    def find_property(self, key: str) -> Optional[str]:
        if key in self.properties:
            return self.properties[key]
        if self.parent is not None:
            return self.parent.find_property(key)
        return None

    def apply_plugin(self, plugin_id: str):
        if plugin_id not in self.plugins:
            self.plugins.append(plugin_id)

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self.plugins

    def add_extension(self, name: str, extension: Any):
        if name in self.extensions:
            raise ValueError(f"Extension '{name}' already exists in project {self.path}")
        self.extensions[name] = extension

    def find_extension(self, name: str) -> Optional[Any]:
        return self.extensions.get(name)

    def register_task(self, name: str, task_type: str, **properties) -> Task:
        task = self.tasks.get(name)
        if task is None:
            task = Task(name=name, type=task_type)
            self.tasks[name] = task
        task.properties.update(properties)
        return task

    def add_repository(self, name: str, url: str, credentials: Optional[Dict[str, str]] = None):
        if all(r.name != name for r in self.repositories):
            self.repositories.append(Repository(name=name, url=url, credentials=credentials))

    @property
    def kotlin(self) -> Optional[KotlinMultiplatformExtension]:
        return self.extensions.get("kotlin")

    @property
    def kotlin_jvm(self) -> Optional[KotlinJvmExtension]:
        return self.extensions.get(KOTLIN_JVM_EXTENSION_NAME)

    def dependency_handler(self) -> DependencyHandler:
        return DependencyHandler(self)
