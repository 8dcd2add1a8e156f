"""Identifier generation for orders, trades and positions."""

import random
import string
from typing import Optional

from .clock import Clock

_BASE36 = string.digits + string.ascii_lowercase


class IdGenerator:
    """
    Generates process-local identifiers.
    
    Order and position ids carry a per-generator counter so two ids minted
    in the same millisecond never collide. Trade ids carry a random suffix.
    """
    
    def __init__(self, clock: Clock, seed: Optional[int] = None):
        self.clock = clock
        self._rng = random.Random(seed)
        self._order_counter = 0
        self._position_counter = 0
    
    def next_order_id(self) -> str:
        self._order_counter += 1
        return f"order-{self.clock.now()}-{self._order_counter}"
    
    def next_position_id(self) -> str:
        self._position_counter += 1
        return f"pos-{self.clock.now()}-{self._position_counter}"
    
    def next_trade_id(self) -> str:
        suffix = ''.join(self._rng.choice(_BASE36) for _ in range(9))
        return f"trade-{self.clock.now()}-{suffix}"
    
    def reset(self) -> None:
        """Reset counters."""
        self._order_counter = 0
        self._position_counter = 0
