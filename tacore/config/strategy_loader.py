"""
YAML loader for rule strategies.

A strategy file holds the entry and exit rules as descriptor mappings, so
strategies can be shared and edited without code changes:

    name: rsi-breakout
    description: Enter on cross up, exit on stop
    num_factory: double
    unstable_bars: 14
    entry:
      type: CrossedUpIndicatorRule
      components:
        - type: ClosePriceIndicator
        - type: ConstantIndicator
          parameters: {value: '100'}
    exit:
      type: StopLossRule
      parameters: {percentage: '5'}
      components:
        - type: ClosePriceIndicator
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..num import get_num_factory
from ..rules import BaseStrategy
from ..serialization import (
    MalformedDescriptorError,
    describe_rule,
    from_dict,
    num_factory_names,
    rule_from_descriptor,
    to_dict,
)
from ..series import BarSeries
from ..shared.defaults import DEFAULT_NUM_FACTORY, UNSTABLE_BARS

logger = logging.getLogger(__name__)


def _rule_from_section(config_dict: Dict[str, Any], key: str, series: BarSeries, yaml_path: Path):
    section = config_dict.get(key)
    if not section:
        raise ValueError(f"Missing '{key}' rule in {yaml_path}")
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' in {yaml_path} must be a rule mapping, got {type(section).__name__}")
    try:
        return rule_from_descriptor(series, from_dict(section))
    except MalformedDescriptorError as e:
        raise ValueError(f"Invalid '{key}' rule in {yaml_path}: {e}") from e


def load_strategy_from_yaml(yaml_path: Union[str, Path], series: BarSeries) -> BaseStrategy:
    """
    Load a strategy from a YAML file and bind its rules to series.

    Args:
        yaml_path: Path to YAML strategy file
        series: Series the rules and their indicators are evaluated on

    Returns:
        BaseStrategy

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If the file is empty, the num_factory does not match the
            series, or a rule is missing or invalid
        UnknownComponentTypeError: If a rule or indicator type is unknown
            (a ValueError subclass)
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Strategy file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        config_dict = yaml.safe_load(f)

    if not config_dict:
        raise ValueError(f"Empty strategy file: {yaml_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(f"Strategy file must contain a mapping: {yaml_path}")

    factory_name = config_dict.get('num_factory', DEFAULT_NUM_FACTORY)
    factory = get_num_factory(factory_name)
    if factory.name != series.num_factory.name:
        raise ValueError(
            f"Strategy {yaml_path} expects '{factory.name}' numbers but series uses '{series.num_factory.name}'"
        )

    unstable_bars = config_dict.get('unstable_bars', UNSTABLE_BARS)
    if isinstance(unstable_bars, bool) or not isinstance(unstable_bars, int):
        raise ValueError(f"unstable_bars must be an integer, got {unstable_bars!r}")

    entry_rule = _rule_from_section(config_dict, 'entry', series, yaml_path)
    exit_rule = _rule_from_section(config_dict, 'exit', series, yaml_path)
    name = config_dict.get('name', yaml_path.stem)

    logger.info(f"Loaded strategy '{name}' from {yaml_path}")
    return BaseStrategy(entry_rule, exit_rule, unstable_bars=unstable_bars, name=name)


def save_strategy_to_yaml(
    strategy: BaseStrategy,
    yaml_path: Union[str, Path],
    num_factory: Optional[str] = None,
    description: Optional[str] = None,
):
    """
    Save a strategy to a YAML file.

    Args:
        strategy: Strategy whose rules are all serializable
        yaml_path: Path where to save YAML file
        num_factory: Name of the num factory the rules were built with;
            taken from the rules' indicators when omitted (default factory
            for rules without indicators)
        description: Optional free-text description

    Raises:
        UnsupportedSerializationError: If a rule cannot be described
        ValueError: If the rules mix num factories or num_factory
            contradicts them
    """
    yaml_path = Path(yaml_path)

    used = num_factory_names(strategy.entry_rule) | num_factory_names(strategy.exit_rule)
    if len(used) > 1:
        raise ValueError(f"Strategy rules mix num factories: {sorted(used)}")
    if num_factory is None:
        num_factory = used.pop() if used else DEFAULT_NUM_FACTORY
    elif used and num_factory not in used:
        raise ValueError(
            f"num_factory '{num_factory}' does not match the rules, which use '{used.pop()}'"
        )

    config_dict: Dict[str, Any] = {
        'name': strategy.name or yaml_path.stem,
        **({'description': description} if description else {}),
        'num_factory': num_factory,
        'unstable_bars': strategy.unstable_bars,
        'entry': to_dict(describe_rule(strategy.entry_rule)),
        'exit': to_dict(describe_rule(strategy.exit_rule)),
    }

    # Ensure parent directory exists
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    with open(yaml_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved strategy '{config_dict['name']}' to {yaml_path}")
