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
Gradle integration: apply library and module configurations to a build.
"""

from .host import Project
from .jvm_variant import JvmLibraryVariantConfiguration, apply_jvm_library_variant
from .library import LibraryConfiguration, LibraryExtension, apply_library
from .module import apply_library_module, apply_module_configuration
from .properties import PropertySource
from .render import render_build_script, render_gradle_properties, render_settings_script

__all__ = [
    'JvmLibraryVariantConfiguration',
    'LibraryConfiguration',
    'LibraryExtension',
    'Project',
    'PropertySource',
    'apply_jvm_library_variant',
    'apply_library',
    'apply_library_module',
    'apply_module_configuration',
    'render_build_script',
    'render_gradle_properties',
    'render_settings_script',
]
