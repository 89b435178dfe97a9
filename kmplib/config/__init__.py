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
Declarative library module configuration.

Builders accumulate partial configuration statements and produce immutable
values; values of the same shape combine with ``merge``.
"""

from .dependencies import (
    Dependencies,
    DependenciesBuilder,
    DependencyEntry,
    KotlinDependency,
    ProjectDependency,
)
from .language import LanguageBuilder, LanguageSettings
from .merge import merge
from .module import LibraryModuleConfiguration, LibraryModuleConfigurationBuilder
from .targets import (
    CommonTarget,
    JsTarget,
    JvmTarget,
    NativeDarwinTarget,
    Targets,
    TargetsBuilder,
)

__all__ = [
    'CommonTarget',
    'Dependencies',
    'DependenciesBuilder',
    'DependencyEntry',
    'JsTarget',
    'JvmTarget',
    'KotlinDependency',
    'LanguageBuilder',
    'LanguageSettings',
    'LibraryModuleConfiguration',
    'LibraryModuleConfigurationBuilder',
    'NativeDarwinTarget',
    'ProjectDependency',
    'Targets',
    'TargetsBuilder',
    'merge',
]
