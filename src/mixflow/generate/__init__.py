"""
Set Generation Module: score transitions and order tracks into sets.

- Pairwise key + tempo transition scoring
- Greedy set ordering with lookahead (three variants per request)
- Best matches, mixable groups and CSV / M3U / JSON exports
"""

__all__ = ["scoring", "cache", "selector", "matches", "playlist"]
