"""State layer.

Shared mutable state of the sync core: the per-query page cache and the
unread counter. Only the coordinator and the mutator write to it; observers
receive snapshots synchronously after each change.
"""
