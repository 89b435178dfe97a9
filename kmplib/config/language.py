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

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, FrozenSet, List, Set, Tuple

from kmplib.config.merge import concat, sticky, union


@dataclass(frozen=True)
class LanguageSettings:
    """Kotlin language settings applied to every source set of a module."""
    custom_configurations: Tuple[Callable[[Any], None], ...] = ()
    experimental_apis: FrozenSet[str] = frozenset()
    language_features: FrozenSet[str] = frozenset()
    no_explicit_api: bool = False
    no_new_inference: bool = False

    DEFAULT: ClassVar["LanguageSettings"]

    def merge_with(self, other: "LanguageSettings") -> "LanguageSettings":
        return LanguageSettings(
            custom_configurations=concat(self.custom_configurations, other.custom_configurations),
            experimental_apis=union(self.experimental_apis, other.experimental_apis),
            language_features=union(self.language_features, other.language_features),
            no_explicit_api=sticky(self.no_explicit_api, other.no_explicit_api),
            no_new_inference=sticky(self.no_new_inference, other.no_new_inference),
        )


LanguageSettings.DEFAULT = LanguageSettings()


class LanguageBuilder:

    def __init__(self):
        self._custom_configurations: List[Callable[[Any], None]] = []
        self._experimental_apis: Set[str] = set()
        self._language_features: Set[str] = set()
        self._no_explicit_api = False
        self._no_new_inference = False

    def build(self) -> LanguageSettings:
        return LanguageSettings(
            custom_configurations=tuple(self._custom_configurations),
            experimental_apis=frozenset(self._experimental_apis),
            language_features=frozenset(self._language_features),
            no_explicit_api=self._no_explicit_api,
            no_new_inference=self._no_new_inference,
        )

    def custom(self, configure: Callable[[Any], None]):
        self._custom_configurations.append(configure)

    def with_experimental_api(self, name: str):
        self._experimental_apis.add(name)

    def with_language_feature(self, name: str):
        self._language_features.add(name)

    def without_explicit_api(self):
        self._no_explicit_api = True

    def without_new_inference(self):
        self._no_new_inference = True
