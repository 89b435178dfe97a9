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
Configure a whole library from its KMPLIB.toml.
"""

import os
from typing import Any, Dict, Optional

from kmplib.gradle.host import Project
from kmplib.gradle.jvm_variant import apply_jvm_library_variant
from kmplib.gradle.library import apply_library
from kmplib.gradle.module import apply_module_configuration
from kmplib.gradle.properties import PropertySource
from kmplib.utils.config.loader import (
    jvm_variant_configurators,
    library_configurator,
    load_project_config,
    module_configurations,
    property_overrides,
)


def project_for_path(root: Project, path: str) -> Project:
    """Return the project at a Gradle path, creating intermediate projects."""
    project = root
    for segment in [s for s in path.split(":") if s]:
        child_dir = os.path.join(project.project_dir, segment) if project.project_dir else None
        project = project.child(segment, project_dir=child_dir)
    return project


def configure_from_config(data: Dict[str, Any], project_dir: Optional[str] = None,
                          properties: Optional[PropertySource] = None,
                          verbose: bool = False) -> Project:
    """
    Apply the library, every module and every JVM variant of a parsed KMPLIB.toml.

    Args:
        data: Parsed configuration
        project_dir: Root directory of the library
        properties: Credential lookup, defaults to a PropertySource over
            the [properties] table, the environment and gradle.properties
        verbose: Print what is being configured

    Returns:
        The configured root project
    """
    overrides = property_overrides(data)
    configure_library = library_configurator(data)
    name = str(data.get('library', {}).get('name', '')) or os.path.basename(os.path.abspath(project_dir or "."))
    root = Project(name, project_dir=project_dir, properties=overrides)
    apply_library(root, configure_library)

    if properties is None:
        properties = PropertySource(overrides=overrides, project_dir=project_dir)

    for path, configuration in module_configurations(data).items():
        project = project_for_path(root, path)
        if verbose:
            print(f"Configuring module {project.path}")
        apply_module_configuration(project, configuration, properties=properties, verbose=verbose)

    for path, configure in jvm_variant_configurators(data).items():
        project = project_for_path(root, path)
        if verbose:
            print(f"Configuring JVM library variant {project.path}")
        apply_jvm_library_variant(project, configure, properties=properties, verbose=verbose)

    return root


def configure_workspace(project_dir: str, properties: Optional[PropertySource] = None,
                        verbose: bool = False) -> Project:
    data = load_project_config(project_dir)
    return configure_from_config(data, project_dir=project_dir, properties=properties, verbose=verbose)
