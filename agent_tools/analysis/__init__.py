"""Pure helpers for coin resolution and price formatting."""
