"""Notification scheduling and engagement engine for the waste diary.

Ensures the local ``wastetrack`` package is resolved as a regular package
rather than through namespace package resolution.
"""
