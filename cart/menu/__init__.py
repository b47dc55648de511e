"""
Menu Module

- **models.py**: Coffee and coffee-list parsing
- **state.py**: Atomically swapped menu snapshot
- **refresh_coordinator.py**: Refresh events to menu snapshots
"""

from .models import Coffee, parse_coffees
from .state import MenuState

__all__ = ["Coffee", "MenuState", "parse_coffees"]
