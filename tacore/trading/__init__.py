"""
Trading ledger module.

Trades, positions and the append-only record that rules read.
"""
from .trade import Trade, TradeType
from .position import Position
from .record import TradingRecord

__all__ = [
    'Trade',
    'TradeType',
    'Position',
    'TradingRecord',
]
