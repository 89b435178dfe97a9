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
Configuration of one library module.

Usage:
    builder = LibraryModuleConfigurationBuilder(description="Core types")
    builder.language(lambda language: language.with_experimental_api("kotlin.ExperimentalStdlibApi"))
    builder.targets(lambda targets: targets.jvm(lambda jvm: jvm.with_java()))
    configuration = builder.build()

A builder is meant for a single configuration pass on a single thread. It does
not guard against concurrent calls.
"""

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, List, Optional, Tuple

from kmplib.config.language import LanguageBuilder, LanguageSettings
from kmplib.config.merge import concat, last_present, sticky, sticky_off
from kmplib.config.targets import Targets, TargetsBuilder


@dataclass(frozen=True)
class LibraryModuleConfiguration:
    custom_configurations: Tuple[Callable[[Any], None], ...] = ()
    description: Optional[str] = None
    is_publishing_enabled: bool = True
    is_publishing_single_target_as_module: bool = False
    language: LanguageSettings = LanguageSettings.DEFAULT
    targets: Targets = Targets.DEFAULT

    DEFAULT: ClassVar["LibraryModuleConfiguration"]

    def merge_with(self, other: "LibraryModuleConfiguration") -> "LibraryModuleConfiguration":
        return LibraryModuleConfiguration(
            custom_configurations=concat(self.custom_configurations, other.custom_configurations),
            description=last_present(self.description, other.description),
            is_publishing_enabled=sticky_off(self.is_publishing_enabled, other.is_publishing_enabled),
            is_publishing_single_target_as_module=sticky(
                self.is_publishing_single_target_as_module,
                other.is_publishing_single_target_as_module,
            ),
            language=self.language.merge_with(other.language),
            targets=self.targets.merge_with(other.targets),
        )


LibraryModuleConfiguration.DEFAULT = LibraryModuleConfiguration()


class LibraryModuleConfigurationBuilder:

    def __init__(self, description: Optional[str] = None):
        self._description = description or None
        self._custom_configurations: List[Callable[[Any], None]] = []
        self._is_publishing_enabled = True
        self._is_publishing_single_target_as_module = False
        self._language: Optional[LanguageSettings] = None
        self._targets: Optional[Targets] = None

    def build(self) -> LibraryModuleConfiguration:
        return LibraryModuleConfiguration(
            custom_configurations=tuple(self._custom_configurations),
            description=self._description,
            is_publishing_enabled=self._is_publishing_enabled,
            is_publishing_single_target_as_module=self._is_publishing_single_target_as_module,
            language=self._language or LanguageSettings.DEFAULT,
            targets=self._targets or Targets.DEFAULT,
        )

    def custom(self, configure: Callable[[Any], None]):
        """Record an action replayed on the Kotlin Multiplatform extension."""
        self._custom_configurations.append(configure)

    def language(self, configure: Callable[[LanguageBuilder], None]):
        builder = LanguageBuilder()
        configure(builder)
        configuration = builder.build()
        if self._language is None:
            self._language = configuration
        else:
            self._language = self._language.merge_with(configuration)

    def publish_single_target_as_module(self):
        self._is_publishing_single_target_as_module = True

    def targets(self, configure: Callable[[TargetsBuilder], None]):
        builder = TargetsBuilder()
        configure(builder)
        configuration = builder.build()
        if self._targets is None:
            self._targets = configuration
        else:
            self._targets = self._targets.merge_with(configuration)

    def without_publishing(self):
        self._is_publishing_enabled = False
