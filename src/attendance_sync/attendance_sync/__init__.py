"""Attendance Sync package.

Local-first data layer for the attendance dashboard: a key/value backed
store of typed collections, a per-entity broadcast fabric that keeps every
open context consistent, and the subscription hooks views use to refresh.
Organized by feature modules (users, attendance, catalog, ...) on top of the
shared storage/sync/store layers.
"""
