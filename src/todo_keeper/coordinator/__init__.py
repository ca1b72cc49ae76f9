"""Authoritative in-memory state and change notification for todos.

The coordinator owns the record sets, applies business rules the file
store does not, keeps per-category counts in sync and flushes every
mutation to disk when auto-save is on. Presentation layers subscribe to
its events instead of polling.
"""
