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
Apply a library module configuration to a Gradle project.
"""

from typing import Callable, List, Optional

from kmplib.config.dependencies import ANNOTATION_PROCESSOR, Dependencies
from kmplib.config.module import LibraryModuleConfiguration, LibraryModuleConfigurationBuilder
from kmplib.config.targets import (
    COMMON,
    DEFAULT_JDK,
    JS,
    JVM,
    JVM_JDK7,
    NATIVE_DARWIN,
    JsTarget,
    JvmTarget,
    NativeDarwinTarget,
    TargetConfiguration,
)
from kmplib.errors import ConfigurationError
from kmplib.gradle.host import (
    DependencyHandler,
    KotlinMultiplatformExtension,
    KotlinSourceSet,
    Project,
    ResolutionRule,
)
from kmplib.gradle.library import library_extension
from kmplib.gradle.properties import PropertySource, project_property_source
from kmplib.gradle.publishing import configure_publishing

MODULE_EXTENSION_NAME = "kmpLibraryModule"
KOTLIN_MULTIPLATFORM_PLUGIN = "org.jetbrains.kotlin.multiplatform"
KAPT_PLUGIN = "org.jetbrains.kotlin.kapt"

KOTLIN_GROUP = "org.jetbrains.kotlin"
SAME_VERSION_REASON = "All Kotlin modules must have the same version."
NEW_INFERENCE_ARG = "-Xnew-inference"

# source set prefix of each target tag
SOURCE_SET_NAMES = {
    COMMON: "common",
    JVM: "jvm",
    JVM_JDK7: "jvmJdk7",
    JS: "js",
    NATIVE_DARWIN: "darwin",
}

HOST_SCOPES = {
    "api": "api",
    "implementation": "implementation",
    "compileOnly": "compile_only",
    "runtimeOnly": "runtime_only",
}


def apply_library_module(project: Project,
                         configure: Optional[Callable[[LibraryModuleConfigurationBuilder], None]] = None,
                         description: Optional[str] = None,
                         properties: Optional[PropertySource] = None) -> LibraryModuleConfiguration:
    """
    Build a module configuration and apply it to ``project``.

    Args:
        project: Project of the module (the root project for single-module libraries)
        configure: Action receiving the module configuration builder
        description: Module description
        properties: Credential lookup, defaults to the project's properties and environment

    Returns:
        The module configuration that was applied
    """
    library_extension(project)

    builder = LibraryModuleConfigurationBuilder(description=description)
    if configure is not None:
        configure(builder)
    configuration = builder.build()

    apply_module_configuration(project, configuration, properties=properties)
    return configuration


def apply_module_configuration(project: Project, configuration: LibraryModuleConfiguration,
                               properties: Optional[PropertySource] = None,
                               verbose: bool = False):
    library = library_extension(project)
    if project.find_extension(MODULE_EXTENSION_NAME) is not None:
        raise ConfigurationError(f"kmpLibraryModule {{}} must only be used once in project {project.path}")
    if project.kotlin_jvm is not None:
        raise ConfigurationError(
            f"kmpLibraryModule {{}} cannot be combined with a JVM library variant in project {project.path}"
        )
    _validate_targets(configuration)
    prefixes = _configuration_prefixes(configuration)

    project.apply_plugin(KOTLIN_MULTIPLATFORM_PLUGIN)
    project.group = library.group
    project.version = library.version
    if configuration.description:
        project.description = configuration.description

    kotlin = KotlinMultiplatformExtension(project)
    project.add_extension("kotlin", kotlin)

    for tag, target in configuration.targets.configured():
        _configure_target(project, kotlin, tag, target, prefixes)

    _configure_language(kotlin, configuration)

    for custom in configuration.custom_configurations:
        custom(kotlin)

    project.add_extension(MODULE_EXTENSION_NAME, configuration)

    if configuration.is_publishing_enabled:
        if properties is None:
            properties = project_property_source(project)
        configure_publishing(project, library, configuration, properties, verbose=verbose)
    elif verbose:
        print(f"Publishing disabled for {project.path}")


def _validate_targets(configuration: LibraryModuleConfiguration):
    js = configuration.targets.js
    if js is not None and js.no_browser and js.no_node_js:
        raise ConfigurationError("js target must keep at least one of browser and Node.js")

    darwin = configuration.targets.native_darwin
    if darwin is not None and not darwin.platforms():
        raise ConfigurationError("nativeDarwin target must keep at least one platform")

    for tag, target in configuration.targets.configured():
        if tag in (JVM, JVM_JDK7):
            continue
        for dependencies in (target.dependencies, target.test_dependencies):
            if dependencies.by_scope(ANNOTATION_PROCESSOR):
                raise ConfigurationError(
                    f"annotation processors are only supported for JVM targets, not '{tag}'"
                )

    if configuration.is_publishing_enabled and configuration.is_publishing_single_target_as_module:
        count = len(_host_target_names(configuration))
        if count != 1:
            raise ConfigurationError(
                f"publishSingleTargetAsModule() requires exactly one non-common target, found {count}"
            )


def _host_target_names(configuration: LibraryModuleConfiguration) -> List[str]:
    names = []
    for tag, target in configuration.targets.platform_targets():
        if isinstance(target, NativeDarwinTarget):
            names.extend(target.platforms())
        else:
            names.append(SOURCE_SET_NAMES[tag])
    return names


def _configuration_prefixes(configuration: LibraryModuleConfiguration) -> List[str]:
    """Configuration name prefixes of every source set the module declares."""
    prefixes = [SOURCE_SET_NAMES[tag] for tag, _ in configuration.targets.configured()]
    for name in _host_target_names(configuration):
        if name not in prefixes:
            prefixes.append(name)
    return prefixes


def _configure_target(project: Project, kotlin: KotlinMultiplatformExtension,
                      tag: str, target: TargetConfiguration, all_prefixes: List[str]):
    prefix = SOURCE_SET_NAMES[tag]
    main = kotlin.source_set(f"{prefix}Main")
    test = kotlin.source_set(f"{prefix}Test")
    _remap_source_dirs(main, test, prefix)

    if tag != COMMON:
        main.depends_on.append("commonMain")
        test.depends_on.append("commonTest")

    host_targets = []
    if isinstance(target, JvmTarget):
        jvm_target = kotlin.target(prefix, "jvm")
        jvm_target.attributes["jvmTarget"] = target.jdk or DEFAULT_JDK[tag]
        if target.includes_java:
            jvm_target.attributes["withJava"] = True
        host_targets.append(jvm_target)
    elif isinstance(target, JsTarget):
        js_target = kotlin.target(prefix, "js")
        js_target.attributes["browser"] = not target.no_browser
        js_target.attributes["nodejs"] = not target.no_node_js
        host_targets.append(js_target)
    elif isinstance(target, NativeDarwinTarget):
        for platform in target.platforms():
            host_targets.append(kotlin.target(platform, platform))
            kotlin.source_set(f"{platform}Main").depends_on.append(main.name)
            kotlin.source_set(f"{platform}Test").depends_on.append(test.name)

    _declare_standard_dependencies(tag, target, main, test)
    _declare_dependencies(project, tag, main, target.dependencies, test=False)
    _declare_dependencies(project, tag, test, target.test_dependencies, test=True)

    if target.enforces_same_version_for_all_kotlin_dependencies:
        prefixes = [prefix]
        if isinstance(target, NativeDarwinTarget):
            prefixes += [t.name for t in host_targets]
        for configuration_prefix in prefixes:
            project.resolution_rules.append(ResolutionRule(
                group=KOTLIN_GROUP,
                version=project.kotlin_version,
                reason=SAME_VERSION_REASON,
                configuration_prefix=configuration_prefix,
                excluded_prefixes=[
                    p for p in all_prefixes if p != configuration_prefix and p.startswith(configuration_prefix)
                ],
            ))

    for custom in target.custom_configurations:
        for host_target in host_targets or [kotlin]:
            custom(host_target)


def _remap_source_dirs(main: KotlinSourceSet, test: KotlinSourceSet, prefix: str):
    main.kotlin_dirs = [f"sources/{prefix}"]
    main.resource_dirs = [f"resources/{prefix}"]
    test.kotlin_dirs = [f"tests/sources/{prefix}"]
    test.resource_dirs = [f"tests/resources/{prefix}"]


def jvm_stdlib_module(jdk: str) -> str:
    """Kotlin standard library artifact for a JVM level."""
    if jdk == "1.6":
        return "stdlib"
    if jdk == "1.7":
        return "stdlib-jdk7"
    return "stdlib-jdk8"


def _stdlib_variant(tag: str, target: TargetConfiguration) -> str:
    if tag == COMMON:
        return "stdlib-common"
    if tag == JS:
        return "stdlib-js"
    if isinstance(target, JvmTarget):
        return jvm_stdlib_module(target.jdk or DEFAULT_JDK[tag])
    # native targets get their stdlib from the compiler distribution
    return ""


def _declare_standard_dependencies(tag: str, target: TargetConfiguration,
                                   main: KotlinSourceSet, test: KotlinSourceSet):
    handler = main.dependencies
    if tag == COMMON:
        handler.api(handler.platform(handler.kotlin("bom")))

    variant = _stdlib_variant(tag, target)
    if variant:
        handler.api(handler.kotlin(variant))

    test_modules = {
        COMMON: ["test-common", "test-annotations-common"],
        JVM: ["test-junit"],
        JVM_JDK7: ["test-junit"],
        JS: ["test-js"],
    }
    for module in test_modules.get(tag, []):
        test.dependencies.implementation(test.dependencies.kotlin(module))


def _kapt_configuration(prefix: str, test: bool) -> str:
    name = f"kapt{prefix[0].upper()}{prefix[1:]}"
    return name + "Test" if test else name


def _declare_dependencies(project: Project, tag: str, source_set: KotlinSourceSet,
                          dependencies: Dependencies, test: bool):
    handler = source_set.dependencies
    for entry in dependencies.entries:
        if entry.scope == ANNOTATION_PROCESSOR:
            project.apply_plugin(KAPT_PLUGIN)
            DependencyHandler(project).add(
                _kapt_configuration(SOURCE_SET_NAMES[tag], test),
                entry.notation,
                entry.configure,
            )
            continue
        getattr(handler, HOST_SCOPES[entry.scope])(entry.notation, entry.configure)

    for custom in dependencies.custom_configurations:
        custom(handler)


def _configure_language(kotlin: KotlinMultiplatformExtension, configuration: LibraryModuleConfiguration):
    language = configuration.language

    if not language.no_explicit_api:
        kotlin.explicit_api = "strict"
    if not language.no_new_inference:
        kotlin.add_compiler_arg(NEW_INFERENCE_ARG)

    for source_set in kotlin.source_sets.values():
        settings = source_set.language_settings
        for name in sorted(language.experimental_apis):
            settings.use_experimental_annotation(name)
        for name in sorted(language.language_features):
            settings.enable_language_feature(name)
        for custom in language.custom_configurations:
            custom(settings)


def applied_configuration(project: Project) -> Optional[LibraryModuleConfiguration]:
    return project.find_extension(MODULE_EXTENSION_NAME)


def module_projects(root: Project) -> List[Project]:
    return [p for p in root.all_projects() if applied_configuration(p) is not None]
