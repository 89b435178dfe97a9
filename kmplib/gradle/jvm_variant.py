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
Standalone JVM variant of a library.

A variant is a plain Kotlin/JVM project (no multiplatform targets) that lives
next to the library modules, typically to ship a build for an older JDK. It
shares the library's coordinates, the same-Kotlin-version rule and the
publishing destinations of the modules.
"""

from typing import Callable, List, Optional

from kmplib.errors import ConfigurationError
from kmplib.gradle.host import KOTLIN_JVM_EXTENSION_NAME, KotlinJvmExtension, Project, ResolutionRule
from kmplib.gradle.library import LibraryExtension, library_extension
from kmplib.gradle.module import KOTLIN_GROUP, MODULE_EXTENSION_NAME, SAME_VERSION_REASON, jvm_stdlib_module
from kmplib.gradle.properties import PropertySource, project_property_source
from kmplib.gradle.publishing import configure_component_publishing

VARIANT_EXTENSION_NAME = "kmpJvmLibraryVariant"
KOTLIN_JVM_PLUGIN = "org.jetbrains.kotlin.jvm"
JAVA_LIBRARY_PLUGIN = "java-library"

DEFAULT_VARIANT_JDK = "1.7"
JDK_LEVELS = ("1.6", "1.7", "1.8")
CONTRACTS_ARG = "-Xuse-experimental=kotlin.contracts.ExperimentalContracts"

KAPT_GENERATED_SOURCES = "build/generated/source/kaptKotlin/main"


class JvmLibraryVariantConfiguration:
    """
    Settable properties of a JVM library variant.

    Attributes:
        description: Project description, left unchanged when None
        enforces_same_version_for_all_kotlin_dependencies: Pin every
            org.jetbrains.kotlin dependency to the Kotlin plugin version
        publishing: Register the publication and upload destinations
        jdk: JVM level, one of 1.6, 1.7, 1.8 or a plain major version (9, 11, ...)
    """

    def __init__(self):
        self.description: Optional[str] = None
        self.enforces_same_version_for_all_kotlin_dependencies = True
        self.publishing = True
        self.jdk = DEFAULT_VARIANT_JDK

    def validate(self):
        self.jdk = str(self.jdk)
        if self.jdk not in JDK_LEVELS and not self.jdk.isdigit():
            raise ConfigurationError(
                f"Invalid JDK level '{self.jdk}' for a JVM library variant. "
                f"Must be one of {list(JDK_LEVELS)} or a major version such as 11"
            )

    @property
    def kotlin_jvm_target(self) -> str:
        # Kotlin has no 1.7 bytecode target
        return "1.6" if self.jdk in ("1.6", "1.7") else self.jdk


def apply_jvm_library_variant(project: Project,
                              configure: Optional[Callable[[JvmLibraryVariantConfiguration], None]] = None,
                              properties: Optional[PropertySource] = None,
                              verbose: bool = False) -> JvmLibraryVariantConfiguration:
    """
    Configure ``project`` as a JVM-only variant of the library.

    Args:
        project: Project of the variant
        configure: Action receiving the variant configuration
        properties: Credential lookup, defaults to the project's properties and environment
        verbose: Print which publishing destinations were configured

    Returns:
        The applied variant configuration

    Raises:
        ConfigurationError: If the library is not configured, the project
            already has a variant or a module configuration, or the JDK
            level is invalid
    """
    library = library_extension(project)
    if project.find_extension(VARIANT_EXTENSION_NAME) is not None:
        raise ConfigurationError(f"kmpJvmLibraryVariant {{}} must only be used once in project {project.path}")
    if project.find_extension(MODULE_EXTENSION_NAME) is not None:
        raise ConfigurationError(
            f"kmpJvmLibraryVariant {{}} cannot be combined with kmpLibraryModule {{}} in project {project.path}"
        )

    configuration = JvmLibraryVariantConfiguration()
    if configure is not None:
        configure(configuration)
    configuration.validate()

    jvm = _configure_basics(project, library, configuration)
    project.add_extension(VARIANT_EXTENSION_NAME, configuration)

    if configuration.publishing:
        if properties is None:
            properties = project_property_source(project)
        sources = jvm.source_sets["main"].kotlin_dirs + [KAPT_GENERATED_SOURCES]
        configure_component_publishing(project, library, sources, properties, verbose=verbose)
    elif verbose:
        print(f"Publishing disabled for {project.path}")

    return configuration


def _configure_basics(project: Project, library: LibraryExtension,
                      configuration: JvmLibraryVariantConfiguration) -> KotlinJvmExtension:
    project.apply_plugin(KOTLIN_JVM_PLUGIN)
    project.apply_plugin(JAVA_LIBRARY_PLUGIN)
    project.group = library.group
    project.version = library.version
    if configuration.description:
        project.description = configuration.description

    if configuration.enforces_same_version_for_all_kotlin_dependencies:
        project.resolution_rules.append(ResolutionRule(
            group=KOTLIN_GROUP,
            version=project.kotlin_version,
            reason=SAME_VERSION_REASON,
        ))

    handler = project.dependency_handler()
    handler.api(handler.platform(handler.kotlin("bom")))
    handler.api(handler.kotlin(jvm_stdlib_module(configuration.jdk)))

    jvm = KotlinJvmExtension(project)
    jvm.source_compatibility = configuration.jdk
    jvm.target_compatibility = configuration.jdk
    jvm.jvm_target = configuration.kotlin_jvm_target
    jvm.free_compiler_args.append(CONTRACTS_ARG)

    main = jvm.source_set("main")
    main.kotlin_dirs = ["sources"]
    main.resource_dirs = ["resources"]
    test = jvm.source_set("test")
    test.kotlin_dirs = ["tests/sources"]
    test.resource_dirs = ["tests/resources"]

    project.add_extension(KOTLIN_JVM_EXTENSION_NAME, jvm)
    return jvm


def applied_variant(project: Project) -> Optional[JvmLibraryVariantConfiguration]:
    return project.find_extension(VARIANT_EXTENSION_NAME)


def variant_projects(root: Project) -> List[Project]:
    return [p for p in root.all_projects() if applied_variant(p) is not None]
