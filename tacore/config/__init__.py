"""
Configuration module.

YAML strategy files: rules stored as descriptor mappings.
"""
from .strategy_loader import load_strategy_from_yaml, save_strategy_to_yaml

__all__ = [
    'load_strategy_from_yaml',
    'save_strategy_to_yaml',
]
