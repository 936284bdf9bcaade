"""State/store layer.

This package is the single source of truth for the electoral-vote map: the
typed records, change detection, and the subscriber lists that announce
every update.
"""
