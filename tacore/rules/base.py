"""
Rule base classes.

A rule is a boolean predicate over (index, trading_record). Rules are built
once per strategy and evaluated repeatedly at increasing indices; apart from
the stateful and trailing variants they hold no evaluation state.

Naming:
- A custom name can be set with set_name (blank or None resets it)
- Otherwise the default name is compact JSON: {"type":"AndRule","components":[...]}
  where each component is the child's custom name or its own structure
- The default name is computed lazily, exactly once, even if several threads
  ask for it at the same time
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..trading import TradingRecord

logger = logging.getLogger(__name__)


class _MemoCell:
    """Holds one lazily computed value; compute() runs once until clear()."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value: Optional[str] = None

    def get(self, compute: Callable[[], str]) -> str:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = compute()
            return self._value

    def clear(self) -> None:
        with self._lock:
            self._value = None


class Rule(ABC):
    """
    Base class for all trading rules.

    Subclasses set TYPE_NAME (the canonical kind used for naming and
    serialization) and implement is_satisfied.
    """

    TYPE_NAME = "Rule"

    def __init__(self):
        self._custom_name: Optional[str] = None
        self._default_name = _MemoCell()

    @abstractmethod
    def is_satisfied(self, index: int, trading_record: Optional["TradingRecord"] = None) -> bool:
        """
        Evaluate the rule at a bar index.

        Args:
            index: Bar index
            trading_record: Trade ledger (optional; rules needing it return False without it)

        Returns:
            True if the rule fires at index
        """
        pass

    @property
    def components(self) -> Tuple["Rule", ...]:
        """Child rules in operand order (empty for leaf rules)."""
        return ()

    # --- Combinators ---

    def and_(self, other: "Rule") -> "Rule":
        from .boolean import AndRule
        return AndRule(self, other)

    def or_(self, other: "Rule") -> "Rule":
        from .boolean import OrRule
        return OrRule(self, other)

    def xor(self, other: "Rule") -> "Rule":
        from .boolean import XorRule
        return XorRule(self, other)

    def negation(self) -> "Rule":
        from .boolean import NotRule
        return NotRule(self)

    def __and__(self, other: "Rule") -> "Rule":
        return self.and_(other)

    def __or__(self, other: "Rule") -> "Rule":
        return self.or_(other)

    def __xor__(self, other: "Rule") -> "Rule":
        return self.xor(other)

    def __invert__(self) -> "Rule":
        return self.negation()

    # --- Naming ---

    @property
    def name(self) -> str:
        if self._custom_name is not None:
            return self._custom_name
        return self._default_name.get(self._create_default_name)

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self.set_name(value)

    def set_name(self, name: Optional[str]) -> "Rule":
        """Set a custom name; None or a blank string restores the default name."""
        if name is not None and not name.strip():
            name = None
        self._custom_name = name
        self._default_name.clear()
        return self

    @property
    def has_custom_name(self) -> bool:
        return self._custom_name is not None

    def default_structure(self) -> Dict[str, Any]:
        """Structural summary used for the default name."""
        structure: Dict[str, Any] = {"type": self.TYPE_NAME}
        if self.components:
            structure["components"] = [
                child.name if child.has_custom_name else child.default_structure()
                for child in self.components
            ]
        return structure

    def _create_default_name(self) -> str:
        return json.dumps(self.default_structure(), separators=(",", ":"))

    # --- Tracing ---

    def trace(self, index: int, satisfied: bool, detail: str = "") -> bool:
        """Log the evaluation at DEBUG level and return satisfied."""
        if logger.isEnabledFor(logging.DEBUG):
            suffix = f" ({detail})" if detail else ""
            logger.debug(f"{self.name}#is_satisfied({index}): {satisfied}{suffix}")
        return satisfied

    def __repr__(self) -> str:
        return self.name


class CompositeRule(Rule):
    """Rule holding an ordered tuple of child rules."""

    def __init__(self, *rules: Rule):
        super().__init__()
        for i, rule in enumerate(rules):
            if rule is None:
                raise ValueError(f"{self.TYPE_NAME} operand {i} must not be None")
        self._components: Tuple[Rule, ...] = tuple(rules)

    @property
    def components(self) -> Tuple[Rule, ...]:
        return self._components
