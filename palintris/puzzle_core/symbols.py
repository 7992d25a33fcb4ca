"""
Symbol Catalog
==============

Provides convenient access to the symbol pools loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from palintris.puzzle_core.config_loader import SYMBOL_CATEGORIES, GameConfig, get_config
from palintris.puzzle_core.rng import RandomSource, draw_index, resolve_rng


@dataclass(frozen=True)
class Symbol:
    """A display token and the category it belongs to."""
    id: str
    display: str
    category: str

    def __repr__(self) -> str:
        return f"Symbol({self.id}: {self.display})"


def _symbol_id(category: str, index: int, display: str) -> str:
    if display.isalnum():
        return f"{category}_{display}"
    return f"{category}_{index}"


class SymbolCatalog:
    """
    All symbol pools, by category.

    Pools preserve config order, so prefixes (``get_pool(category, 6)``)
    are stable across runs.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._symbols: Dict[str, Tuple[Symbol, ...]] = {
            category: tuple(
                Symbol(_symbol_id(category, i, display), display, category)
                for i, display in enumerate(config.symbols.get(category))
            )
            for category in SYMBOL_CATEGORIES
        }

    def __getitem__(self, category: str) -> Tuple[Symbol, ...]:
        """Get all symbols of a category."""
        if category not in self._symbols:
            raise KeyError(f"Unknown symbol category: {category}")
        return self._symbols[category]

    def __iter__(self) -> Iterator[str]:
        """Iterate over category names."""
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def get_pool(self, category: str, count: Optional[int] = None) -> List[str]:
        """
        Display strings of a category, optionally only the first ``count``.

        Args:
            category: Symbol category.
            count: Prefix length. Whole category if None.

        Returns:
            List of display strings.
        """
        symbols = self[category]
        if count is not None:
            symbols = symbols[:count]
        return [s.display for s in symbols]

    def get_symbol_by_display(
        self,
        display: str,
        category: Optional[str] = None
    ) -> Optional[Symbol]:
        """
        Look up a symbol by its display string.

        Searches ``category`` only if given, otherwise every category in order.
        """
        categories = [category] if category is not None else list(self._symbols)
        for name in categories:
            for symbol in self[name]:
                if symbol.display == display:
                    return symbol
        return None

    def get_symbol_by_id(self, symbol_id: str) -> Optional[Symbol]:
        for symbols in self._symbols.values():
            for symbol in symbols:
                if symbol.id == symbol_id:
                    return symbol
        return None

    def random_symbols(
        self,
        category: str,
        count: int,
        rng: Optional[RandomSource] = None
    ) -> List[Symbol]:
        """
        Sample up to ``count`` distinct symbols from a category.

        Args:
            category: Symbol category.
            count: Number of symbols wanted.
            rng: Random source. Unseeded if None.

        Returns:
            Up to ``count`` symbols, without repeats.
        """
        rng = resolve_rng(rng)
        available = list(self[category])
        result: List[Symbol] = []
        while available and len(result) < count:
            result.append(available.pop(draw_index(rng, len(available))))
        return result


_cached_catalog: Optional[SymbolCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> SymbolCatalog:
    """
    Get the symbol catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        SymbolCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = SymbolCatalog(config)
    return _cached_catalog
