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
KMPLIB.toml handler.

Example:

    [library]
    name = "sample"
    version = "1.0.0"
    group = "io.github.example"
    owner = "example"

    [[module]]
    path = "core"
    description = "Core types"

    [module.language]
    experimental_apis = ["kotlin.ExperimentalStdlibApi"]

    [module.targets.jvm]
    include_java = true

    [module.targets.jvm.dependencies]
    api = ["org.jetbrains.kotlinx:kotlinx-coroutines-core:1.4.3"]
    implementation = [{ kotlin = "reflect" }, { project = ":base" }]

    [[jvm_variant]]
    path = "core-jdk7"
    jdk = "1.7"

Repeated ``[[module]]`` tables with the same path are merged. A
``[[jvm_variant]]`` path may only be declared once.
"""

import os
import re
from typing import Any, Callable, Dict, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from kmplib.config.dependencies import DependenciesBuilder, Notation
from kmplib.config.language import LanguageBuilder
from kmplib.config.merge import merge
from kmplib.config.module import LibraryModuleConfiguration, LibraryModuleConfigurationBuilder
from kmplib.config.targets import (
    COMMON,
    JS,
    JVM,
    JVM_JDK7,
    NATIVE_DARWIN,
    TARGET_TAGS,
    JsBuilder,
    JvmBuilder,
    NativeDarwinBuilder,
    TargetBuilder,
    TargetsBuilder,
)
from kmplib.errors import ConfigurationError

CONFIG_FILE_NAME = "KMPLIB.toml"
ROOT_MODULE_PATHS = ("", ".", ":")

LIBRARY_KEYS = (
    "name",
    "version",
    "gradle_version",
    "group",
    "owner",
    "developer_id",
    "developer_name",
    "developer_email",
    "license_name",
    "license_url",
)

# TOML key -> DependenciesBuilder method
DEPENDENCY_SCOPES = {
    "api": "api",
    "implementation": "implementation",
    "compile_only": "compile_only",
    "runtime_only": "runtime_only",
    "kapt": "kapt",
}

# boolean keys of each target table besides enforce_same_kotlin_version, with defaults
TARGET_FLAGS = {
    JVM: {"include_java": False},
    JVM_JDK7: {"include_java": False},
    JS: {"browser": True, "nodejs": True},
    NATIVE_DARWIN: {"ios_arm64": True, "ios_x64": True, "macos_x64": True},
}


def expand_env(value: Any, environ=None) -> Any:
    """
    Expand environment variables in configuration values.

    Supports ${VAR_NAME} and $VAR_NAME syntax, recursing into tables and
    arrays. Unknown variables are left as written.
    """
    environ = os.environ if environ is None else environ
    if isinstance(value, dict):
        return {key: expand_env(item, environ) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item, environ) for item in value]
    if not isinstance(value, str):
        return value

    # Pattern for ${VAR_NAME}
    pattern1 = re.compile(r'\$\{([^}]+)\}')
    value = pattern1.sub(lambda m: environ.get(m.group(1), m.group(0)), value)

    # Pattern for $VAR_NAME
    pattern2 = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
    value = pattern2.sub(lambda m: environ.get(m.group(1), m.group(0)), value)

    return value


def load_project_config(project_dir: str, environ=None) -> Dict[str, Any]:
    """
    Read KMPLIB.toml from a project directory.

    Raises:
        ConfigurationError: If the file is missing or not valid TOML
    """
    config_path = os.path.join(project_dir, CONFIG_FILE_NAME)
    if not os.path.isfile(config_path):
        raise ConfigurationError(f"{CONFIG_FILE_NAME} not found in {os.path.abspath(project_dir)}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid {CONFIG_FILE_NAME}: {e}") from e

    return expand_env(data, environ)


def _table(value: Any, key: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a table, got {type(value).__name__}")
    return value


def _array(value: Any, key: str) -> list:
    if not isinstance(value, list):
        raise ConfigurationError(f"'{key}' must be an array, got {type(value).__name__}")
    return value


def _strings(value: Any, key: str) -> list:
    for item in _array(value, key):
        if not isinstance(item, str):
            raise ConfigurationError(f"'{key}' must only contain strings, got {item!r}")
    return value


def _flag(table: Dict[str, Any], name: str, default: bool, key: str) -> bool:
    value = table.get(name, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}.{name}' must be true or false, got {value!r}")
    return value


def _jdk(table: Dict[str, Any], key: str) -> Optional[str]:
    value = table.get('jdk')
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigurationError(f"'{key}.jdk' must be a JDK level such as \"1.8\", got {value!r}")
    return str(value)


def library_configurator(data: Dict[str, Any]) -> Callable:
    """Return a configure action for ``apply_library`` from the [library] table."""
    library = _table(data.get('library', {}), 'library')

    def configure(configuration):
        for key in LIBRARY_KEYS:
            if key in library:
                setattr(configuration, key, str(library[key]))

    return configure


def parse_notation(value: Any) -> Notation:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if 'kotlin' in value:
            return DependenciesBuilder.kotlin(value['kotlin'], value.get('version'))
        if 'project' in value:
            return DependenciesBuilder.project(value['project'], value.get('configuration'))
        if 'kotlinx' in value:
            if 'version' not in value:
                raise ConfigurationError(f"kotlinx dependency '{value['kotlinx']}' requires a version")
            return DependenciesBuilder.kotlinx(value['kotlinx'], value['version'], value.get('prefix', True))
    raise ConfigurationError(f"Invalid dependency notation: {value!r}")


def _dependencies_configurator(table: Any, key: str):
    table = _table(table, key)
    unknown = set(table) - set(DEPENDENCY_SCOPES)
    if unknown:
        raise ConfigurationError(
            f"Invalid dependency scope(s) in '{key}': {sorted(unknown)}. Must be one of {list(DEPENDENCY_SCOPES)}"
        )
    notations = {
        scope: [parse_notation(value) for value in _array(table[scope], f"{key}.{scope}")]
        for scope in DEPENDENCY_SCOPES if scope in table
    }

    def configure(builder: DependenciesBuilder):
        for scope, method in DEPENDENCY_SCOPES.items():
            for notation in notations.get(scope, []):
                getattr(builder, method)(notation)

    return configure


def _target_configurator(tag: str, table: Any, key: str):
    """Validate a target table and return the action declaring it."""
    table = _table(table, key)
    dependencies = test_dependencies = None
    if 'dependencies' in table:
        dependencies = _dependencies_configurator(table['dependencies'], f"{key}.dependencies")
    if 'test_dependencies' in table:
        test_dependencies = _dependencies_configurator(table['test_dependencies'], f"{key}.test_dependencies")

    flags = {'enforce_same_kotlin_version': _flag(table, 'enforce_same_kotlin_version', True, key)}
    for name, default in TARGET_FLAGS.get(tag, {}).items():
        flags[name] = _flag(table, name, default, key)

    jdk = _jdk(table, key)

    def configure(builder: TargetBuilder):
        if dependencies is not None:
            builder.dependencies(dependencies)
        if test_dependencies is not None:
            builder.test_dependencies(test_dependencies)
        if not flags['enforce_same_kotlin_version']:
            builder.without_enforcing_same_version_for_all_kotlin_dependencies()

        if isinstance(builder, JvmBuilder):
            if flags['include_java']:
                builder.with_java()
            if jdk is not None:
                builder.with_jdk(jdk)
        elif isinstance(builder, JsBuilder):
            if not flags['browser']:
                builder.without_browser()
            if not flags['nodejs']:
                builder.without_node_js()
        elif isinstance(builder, NativeDarwinBuilder):
            if not flags['ios_arm64']:
                builder.without_ios_arm64()
            if not flags['ios_x64']:
                builder.without_ios_x64()
            if not flags['macos_x64']:
                builder.without_macos_x64()

    return configure


def _targets_configurator(table: Any, key: str):
    table = _table(table, key)
    unknown = set(table) - set(TARGET_TAGS)
    if unknown:
        raise ConfigurationError(
            f"Invalid target(s): {sorted(unknown)}. Must be one of {list(TARGET_TAGS)}"
        )
    actions = [(tag, _target_configurator(tag, table[tag], f"{key}.{tag}")) for tag in TARGET_TAGS if tag in table]

    def configure(targets: TargetsBuilder):
        declare = {
            COMMON: targets.common,
            JVM: targets.jvm,
            JVM_JDK7: targets.jvm_jdk7,
            JS: targets.js,
            NATIVE_DARWIN: targets.native_darwin,
        }
        for tag, action in actions:
            declare[tag](action)

    return configure


def _language_configurator(table: Any, key: str):
    table = _table(table, key)
    experimental_apis = _strings(table.get('experimental_apis', []), f"{key}.experimental_apis")
    language_features = _strings(table.get('language_features', []), f"{key}.language_features")
    explicit_api = _flag(table, 'explicit_api', True, key)
    new_inference = _flag(table, 'new_inference', True, key)

    def configure(language: LanguageBuilder):
        for name in experimental_apis:
            language.with_experimental_api(name)
        for name in language_features:
            language.with_language_feature(name)
        if not explicit_api:
            language.without_explicit_api()
        if not new_inference:
            language.without_new_inference()

    return configure


def module_configuration_from_config(entry: Any, key: str = 'module') -> LibraryModuleConfiguration:
    """Build the configuration of one [[module]] table."""
    entry = _table(entry, key)
    description = entry.get('description')
    if description is not None and not isinstance(description, str):
        raise ConfigurationError(f"'{key}.description' must be a string, got {description!r}")
    builder = LibraryModuleConfigurationBuilder(description=description)

    if 'language' in entry:
        builder.language(_language_configurator(entry['language'], f"{key}.language"))
    if 'targets' in entry:
        builder.targets(_targets_configurator(entry['targets'], f"{key}.targets"))
    if not _flag(entry, 'publishing', True, key):
        builder.without_publishing()
    if _flag(entry, 'single_target_as_module', False, key):
        builder.publish_single_target_as_module()

    return builder.build()


def module_path(entry: Dict[str, Any]) -> str:
    path = str(entry.get('path', '')).strip()
    if path in ROOT_MODULE_PATHS:
        return ":"
    return ":" + path.strip(":")


def module_configurations(data: Dict[str, Any]) -> Dict[str, LibraryModuleConfiguration]:
    """
    Build all module configurations, keyed by Gradle project path.

    Tables that share a path are merged in file order.
    """
    modules = data.get('module', [])
    if isinstance(modules, dict):
        modules = [modules]

    result: Dict[str, LibraryModuleConfiguration] = {}
    for index, entry in enumerate(_array(modules, 'module')):
        key = f"module[{index}]"
        configuration = module_configuration_from_config(entry, key)
        path = module_path(entry)
        result[path] = merge(result.get(path), configuration)
    return result


def _jvm_variant_configurator(entry: Dict[str, Any], key: str) -> Callable:
    description = entry.get('description')
    if description is not None and not isinstance(description, str):
        raise ConfigurationError(f"'{key}.description' must be a string, got {description!r}")
    jdk = _jdk(entry, key)
    enforce = _flag(entry, 'enforce_same_kotlin_version', True, key)
    publishing = _flag(entry, 'publishing', True, key)

    def configure(variant):
        if description:
            variant.description = description
        if jdk is not None:
            variant.jdk = jdk
        variant.enforces_same_version_for_all_kotlin_dependencies = enforce
        variant.publishing = publishing

    return configure


def jvm_variant_configurators(data: Dict[str, Any]) -> Dict[str, Callable]:
    """
    Configure actions for ``apply_jvm_library_variant`` from the [[jvm_variant]]
    tables, keyed by Gradle project path.
    """
    variants = data.get('jvm_variant', [])
    if isinstance(variants, dict):
        variants = [variants]

    result: Dict[str, Callable] = {}
    for index, entry in enumerate(_array(variants, 'jvm_variant')):
        key = f"jvm_variant[{index}]"
        configure = _jvm_variant_configurator(_table(entry, key), key)
        path = module_path(entry)
        if path in result:
            raise ConfigurationError(f"JVM library variant {path} is declared more than once")
        result[path] = configure
    return result


def property_overrides(data: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Non-secret project properties from the [properties] table."""
    properties = _table(data.get('properties') or {}, 'properties')
    if not properties:
        return None
    return {key: str(value) for key, value in properties.items()}
