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

import abc

from kmplib.utils.context.context import CliContext
from kmplib.utils.context.namespace import CliNameSpace
from kmplib.utils.context.result import CliResult
from kmplib.workspace import configure_workspace


# Base class of every subcommand
class CliCommand(abc.ABC):
    @abc.abstractmethod
    def description(self) -> str:
        pass

    @abc.abstractmethod
    def cli(self) -> CliNameSpace:
        pass

    @abc.abstractmethod
    def exec(self, context: CliContext, args: CliNameSpace):
        pass

    def load_workspace(self, context: CliContext, verbose: bool = False) -> CliResult:
        """Configure the library in the context's project directory."""
        return CliResult.capture(configure_workspace, context.project_dir, verbose=verbose)
