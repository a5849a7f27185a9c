"""Sync layer: fetch lifecycle, search debouncing and optimistic edits."""
