"""
KMPLIB.toml configuration for kmplib.

This module reads the project file and turns it into library and module
configurations.
"""

from .loader import (
    load_project_config,
    library_configurator,
    jvm_variant_configurators,
    module_configuration_from_config,
    module_configurations,
)

__all__ = [
    'jvm_variant_configurators',
    'library_configurator',
    'load_project_config',
    'module_configuration_from_config',
    'module_configurations',
]
