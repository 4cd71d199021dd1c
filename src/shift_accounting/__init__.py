"""Shift accounting package.

Feature modules (sessions, breaks, rollups, schedules, overtime) each expose a
repository Protocol plus a MySQL implementation; ``attendance`` holds the
service that ties them together and a thin Flask controller on top.
"""
