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
Merge rules shared by all configuration values.

Every configuration value implements ``merge_with(incoming)`` in terms of the
helpers below, one helper per field kind:

- opt-out flags defaulting to false: ``sticky``
- flags defaulting to true that can only be switched off: ``sticky_off``
- sets of names: ``union``
- ordered instructions (dependencies, custom actions): ``concat``
- optional single values: ``last_present``
- scalars that must agree: ``same_or_conflict``

Merging any value with its default returns it unchanged, and merging is
associative.
"""

from typing import Any, FrozenSet, Iterable, Optional, Tuple, TypeVar

from kmplib.errors import ConfigurationError

T = TypeVar("T")


def sticky(existing: bool, incoming: bool) -> bool:
    return existing or incoming


def sticky_off(existing: bool, incoming: bool) -> bool:
    return existing and incoming


def union(existing: Iterable[str], incoming: Iterable[str]) -> FrozenSet[str]:
    return frozenset(existing) | frozenset(incoming)


def concat(existing: Tuple[T, ...], incoming: Tuple[T, ...]) -> Tuple[T, ...]:
    return tuple(existing) + tuple(incoming)


def last_present(existing: Optional[T], incoming: Optional[T]) -> Optional[T]:
    # a non-empty value beats an empty one, which beats None
    if incoming is None or incoming == "":
        return incoming if existing is None else existing
    return incoming


def same_or_conflict(existing: Optional[T], incoming: Optional[T], what: str) -> Optional[T]:
    """
    Merge an optional scalar that both sides must agree on.

    Args:
        existing: Value from the configuration merged into
        incoming: Value from the configuration being merged
        what: Human readable name of the setting, used in the error message

    Returns:
        The value set on either side, or None if neither side sets it

    Raises:
        ConfigurationError: If both sides set different values
    """
    if existing is None:
        return incoming
    if incoming is None or incoming == existing:
        return existing
    raise ConfigurationError(
        f"conflicting values for {what}: '{existing}' and '{incoming}'"
    )


def merge(existing: Any, incoming: Any) -> Any:
    """
    Merge two configuration values of the same shape.

    Either side may be None, in which case the other side is returned as is.
    """
    if existing is None:
        return incoming
    if incoming is None:
        return existing
    if type(existing) is not type(incoming):
        raise ConfigurationError(
            f"cannot merge {type(existing).__name__} with {type(incoming).__name__}"
        )
    return existing.merge_with(incoming)
