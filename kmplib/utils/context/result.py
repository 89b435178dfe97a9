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

import sys

from kmplib.errors import ConfigurationError


# Outcome of a command step: a value, or the configuration error that stopped it
class CliResult:
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    @classmethod
    def capture(cls, func, *args, **kwargs) -> "CliResult":
        """Call ``func``, turning a ConfigurationError into a failed result."""
        try:
            return cls(value=func(*args, **kwargs))
        except ConfigurationError as e:
            return cls(error=str(e))

    def is_success(self):
        return self.error is None

    def is_failure(self):
        return self.error is not None

    def get_value(self, default=None):
        if self.is_success():
            return self.value
        else:
            return default

    def get_error(self, default=None):
        if self.is_failure():
            return self.error
        else:
            return default

    def exit_on_failure(self, code: int = 1):
        """Return the value, or print the error and exit with ``code``."""
        if self.is_failure():
            print(f"Error: {self.error}")
            sys.exit(code)
        return self.value
