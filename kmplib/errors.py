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


class ConfigurationError(ValueError):
    """
    Fatal configuration error.

    Raised when a declaration violates an invariant of the library or module
    configuration. The configuration pass is aborted and the message is shown
    to the user verbatim, so it must say which invariant was violated.
    """
