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
Platform targets of a library module.

Each target kind carries the shared fields of ``TargetConfiguration`` plus its
own switches. A module has at most one configuration per target tag; the
common target always exists.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, ClassVar, Dict, Iterator, List, Optional, Tuple

from kmplib.config.dependencies import Dependencies, DependenciesBuilder
from kmplib.config.merge import concat, merge, same_or_conflict, sticky, sticky_off
from kmplib.errors import ConfigurationError

COMMON = "common"
JVM = "jvm"
JVM_JDK7 = "jvm_jdk7"
JS = "js"
NATIVE_DARWIN = "native_darwin"

TARGET_TAGS = (COMMON, JVM, JVM_JDK7, JS, NATIVE_DARWIN)

DEFAULT_JDK = {
    JVM: "1.8",
    JVM_JDK7: "1.7",
}


@dataclass(frozen=True)
class TargetConfiguration:
    custom_configurations: Tuple[Callable[[Any], None], ...] = ()
    dependencies: Dependencies = Dependencies.DEFAULT
    enforces_same_version_for_all_kotlin_dependencies: bool = True
    test_dependencies: Dependencies = Dependencies.DEFAULT

    def _merge_shared(self, other: "TargetConfiguration") -> Dict[str, Any]:
        if type(self) is not type(other):
            raise ConfigurationError(
                f"cannot merge {type(self).__name__} with {type(other).__name__}"
            )
        return dict(
            custom_configurations=concat(self.custom_configurations, other.custom_configurations),
            dependencies=self.dependencies.merge_with(other.dependencies),
            enforces_same_version_for_all_kotlin_dependencies=sticky_off(
                self.enforces_same_version_for_all_kotlin_dependencies,
                other.enforces_same_version_for_all_kotlin_dependencies,
            ),
            test_dependencies=self.test_dependencies.merge_with(other.test_dependencies),
        )

    def merge_with(self, other):
        return replace(self, **self._merge_shared(other))


@dataclass(frozen=True)
class CommonTarget(TargetConfiguration):
    DEFAULT: ClassVar["CommonTarget"]


@dataclass(frozen=True)
class JvmTarget(TargetConfiguration):
    includes_java: bool = False
    # None means the default level of the slot the target is declared in
    jdk: Optional[str] = None

    def merge_with(self, other: "JvmTarget") -> "JvmTarget":
        shared = self._merge_shared(other)
        return replace(
            self,
            includes_java=sticky(self.includes_java, other.includes_java),
            jdk=same_or_conflict(self.jdk, other.jdk, "JVM target JDK level"),
            **shared,
        )


@dataclass(frozen=True)
class JsTarget(TargetConfiguration):
    no_browser: bool = False
    no_node_js: bool = False

    def merge_with(self, other: "JsTarget") -> "JsTarget":
        shared = self._merge_shared(other)
        return replace(
            self,
            no_browser=sticky(self.no_browser, other.no_browser),
            no_node_js=sticky(self.no_node_js, other.no_node_js),
            **shared,
        )


@dataclass(frozen=True)
class NativeDarwinTarget(TargetConfiguration):
    no_ios_arm64: bool = False
    no_ios_x64: bool = False
    no_macos_x64: bool = False

    def merge_with(self, other: "NativeDarwinTarget") -> "NativeDarwinTarget":
        shared = self._merge_shared(other)
        return replace(
            self,
            no_ios_arm64=sticky(self.no_ios_arm64, other.no_ios_arm64),
            no_ios_x64=sticky(self.no_ios_x64, other.no_ios_x64),
            no_macos_x64=sticky(self.no_macos_x64, other.no_macos_x64),
            **shared,
        )

    def platforms(self) -> List[str]:
        """Darwin platforms that remain enabled, in declaration order."""
        result = []
        if not self.no_ios_arm64:
            result.append("iosArm64")
        if not self.no_ios_x64:
            result.append("iosX64")
        if not self.no_macos_x64:
            result.append("macosX64")
        return result


CommonTarget.DEFAULT = CommonTarget()


@dataclass(frozen=True)
class Targets:
    common: CommonTarget = CommonTarget.DEFAULT
    jvm: Optional[JvmTarget] = None
    jvm_jdk7: Optional[JvmTarget] = None
    js: Optional[JsTarget] = None
    native_darwin: Optional[NativeDarwinTarget] = None

    DEFAULT: ClassVar["Targets"]

    def merge_with(self, other: "Targets") -> "Targets":
        return Targets(**{
            tag: merge(getattr(self, tag), getattr(other, tag))
            for tag in TARGET_TAGS
        })

    def configured(self) -> Iterator[Tuple[str, TargetConfiguration]]:
        for tag in TARGET_TAGS:
            target = getattr(self, tag)
            if target is not None:
                yield tag, target

    def platform_targets(self) -> List[Tuple[str, TargetConfiguration]]:
        return [(tag, target) for tag, target in self.configured() if tag != COMMON]


Targets.DEFAULT = Targets()


class TargetBuilder:
    """Accumulation shared by all target kinds."""

    def __init__(self):
        self._custom_configurations: List[Callable[[Any], None]] = []
        self._enforces_same_version_for_all_kotlin_dependencies = True
        self._dependencies = Dependencies.DEFAULT
        self._test_dependencies = Dependencies.DEFAULT

    def _shared(self) -> Dict[str, Any]:
        return dict(
            custom_configurations=tuple(self._custom_configurations),
            dependencies=self._dependencies,
            enforces_same_version_for_all_kotlin_dependencies=self._enforces_same_version_for_all_kotlin_dependencies,
            test_dependencies=self._test_dependencies,
        )

    def custom(self, configure: Callable[[Any], None]):
        self._custom_configurations.append(configure)

    def dependencies(self, configure: Callable[[DependenciesBuilder], None]):
        builder = DependenciesBuilder()
        configure(builder)
        self._dependencies = self._dependencies.merge_with(builder.build())

    def test_dependencies(self, configure: Callable[[DependenciesBuilder], None]):
        builder = DependenciesBuilder()
        configure(builder)
        self._test_dependencies = self._test_dependencies.merge_with(builder.build())

    def without_enforcing_same_version_for_all_kotlin_dependencies(self):
        self._enforces_same_version_for_all_kotlin_dependencies = False


class CommonBuilder(TargetBuilder):

    def build(self) -> CommonTarget:
        return CommonTarget(**self._shared())


class JvmBuilder(TargetBuilder):

    def __init__(self):
        super().__init__()
        self._includes_java = False
        self._jdk: Optional[str] = None

    def build(self) -> JvmTarget:
        return JvmTarget(includes_java=self._includes_java, jdk=self._jdk, **self._shared())

    def with_java(self):
        self._includes_java = True

    def with_jdk(self, level: str):
        self._jdk = same_or_conflict(self._jdk, str(level), "JVM target JDK level")


class JsBuilder(TargetBuilder):

    def __init__(self):
        super().__init__()
        self._no_browser = False
        self._no_node_js = False

    def build(self) -> JsTarget:
        return JsTarget(no_browser=self._no_browser, no_node_js=self._no_node_js, **self._shared())

    def without_browser(self):
        self._no_browser = True

    def without_node_js(self):
        self._no_node_js = True


class NativeDarwinBuilder(TargetBuilder):

    def __init__(self):
        super().__init__()
        self._no_ios_arm64 = False
        self._no_ios_x64 = False
        self._no_macos_x64 = False

    def build(self) -> NativeDarwinTarget:
        return NativeDarwinTarget(
            no_ios_arm64=self._no_ios_arm64,
            no_ios_x64=self._no_ios_x64,
            no_macos_x64=self._no_macos_x64,
            **self._shared(),
        )

    def without_ios_arm64(self):
        self._no_ios_arm64 = True

    def without_ios_x64(self):
        self._no_ios_x64 = True

    def without_macos_x64(self):
        self._no_macos_x64 = True


class TargetsBuilder:
    """
    Collect target declarations.

    Every call creates a fresh sub-builder, runs ``configure`` on it and merges
    the result into the slot of that target, so a target may be declared any
    number of times.
    """

    def __init__(self):
        self._slots: Dict[str, Optional[TargetConfiguration]] = {tag: None for tag in TARGET_TAGS}

    def build(self) -> Targets:
        slots = dict(self._slots)
        slots[COMMON] = slots[COMMON] or CommonTarget.DEFAULT
        return Targets(**slots)

    def _declare(self, tag: str, builder: TargetBuilder, configure):
        if configure is not None:
            configure(builder)
        self._slots[tag] = merge(self._slots[tag], builder.build())

    def common(self, configure: Optional[Callable[[CommonBuilder], None]] = None):
        self._declare(COMMON, CommonBuilder(), configure)

    def jvm(self, configure: Optional[Callable[[JvmBuilder], None]] = None):
        self._declare(JVM, JvmBuilder(), configure)

    def jvm_jdk7(self, configure: Optional[Callable[[JvmBuilder], None]] = None):
        builder = JvmBuilder()
        if configure is not None:
            configure(builder)
        target = builder.build()
        if target.jdk not in (None, DEFAULT_JDK[JVM_JDK7]):
            raise ConfigurationError(
                f"jvmJdk7 target must use JDK {DEFAULT_JDK[JVM_JDK7]}, not {target.jdk}"
            )
        self._slots[JVM_JDK7] = merge(self._slots[JVM_JDK7], target)

    def js(self, configure: Optional[Callable[[JsBuilder], None]] = None):
        self._declare(JS, JsBuilder(), configure)

    def native_darwin(self, configure: Optional[Callable[[NativeDarwinBuilder], None]] = None):
        self._declare(NATIVE_DARWIN, NativeDarwinBuilder(), configure)
