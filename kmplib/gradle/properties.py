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
Property and credential lookup.

Credentials are never required: a missing key means the feature that needs it
is disabled.
"""

import os
import re
from typing import Dict, List, Mapping, Optional, Tuple

GRADLE_PROJECT_ENV_PREFIX = "ORG_GRADLE_PROJECT_"

ESCAPE_PATTERN = re.compile(r'\\(.)')
ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', 'f': '\f'}


def _unescape(text: str) -> str:
    return ESCAPE_PATTERN.sub(lambda m: ESCAPES.get(m.group(1), m.group(1)), text)


def _is_continued(line: str) -> bool:
    # an odd number of trailing backslashes escapes the line break
    return (len(line) - len(line.rstrip('\\'))) % 2 == 1


def _parse_line(line: str) -> Tuple[str, str]:
    escaped = False
    for index, char in enumerate(line):
        if escaped:
            escaped = False
        elif char == '\\':
            escaped = True
        elif char in '=:':
            return _unescape(line[:index].strip()), _unescape(line[index + 1:].strip())
    return _unescape(line.strip()), ""


def read_properties_file(path: str) -> Dict[str, str]:
    """
    Read a Java .properties file.

    Supports ``key=value`` and ``key: value`` lines, ``#`` and ``!`` comments,
    trailing backslash continuations and backslash escapes (``\\n``, ``\\=``,
    ``\\:``, ...).
    """
    result = {}
    if not path or not os.path.isfile(path):
        return result

    with open(path, 'r', encoding='utf-8') as f:
        pending = ""
        for raw_line in f:
            line = raw_line.rstrip('\r\n').lstrip()
            if not pending and (not line or line[0] in '#!'):
                continue
            if _is_continued(line):
                pending += line[:-1]
                continue
            key, value = _parse_line(pending + line)
            pending = ""
            result[key] = value

    if pending:
        key, value = _parse_line(pending)
        result[key] = value
    return result


class PropertySource:
    """
    Look up a property by key, returning None when it is absent.

    Lookup order:
        1. explicit overrides
        2. ORG_GRADLE_PROJECT_<key> environment variable
        3. <key> environment variable
        4. <project_dir>/gradle.properties
        5. <gradle_user_home>/gradle.properties
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None,
                 project_dir: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 gradle_user_home: Optional[str] = None):
        self.overrides = dict(overrides or {})
        self.environ = os.environ if environ is None else environ

        if gradle_user_home is None:
            gradle_user_home = self.environ.get(
                'GRADLE_USER_HOME', os.path.join(os.path.expanduser('~'), '.gradle')
            )

        self._files: List[Dict[str, str]] = []
        if project_dir:
            self._files.append(read_properties_file(os.path.join(project_dir, 'gradle.properties')))
        if gradle_user_home:
            self._files.append(read_properties_file(os.path.join(gradle_user_home, 'gradle.properties')))

    def __call__(self, key: str) -> Optional[str]:
        return self.get(key)

    def get(self, key: str) -> Optional[str]:
        candidates = [
            self.overrides.get(key),
            self.environ.get(GRADLE_PROJECT_ENV_PREFIX + key),
            self.environ.get(key),
        ]
        candidates.extend(properties.get(key) for properties in self._files)

        for value in candidates:
            if value:
                return value
        return None


def project_property_source(project, overrides: Optional[Mapping[str, str]] = None,
                            environ: Optional[Mapping[str, str]] = None) -> PropertySource:
    """Property source for a host project: its ``-P`` properties take precedence."""
    merged = {}
    chain = []
    current = project
    while current is not None:
        chain.append(current)
        current = current.parent
    for node in reversed(chain):
        merged.update(node.properties)
    merged.update(overrides or {})

    return PropertySource(
        overrides=merged,
        project_dir=project.root_project.project_dir,
        environ=environ,
    )
