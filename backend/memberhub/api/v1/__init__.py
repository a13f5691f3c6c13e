"""Version 1 of the HTTP API."""

from __future__ import annotations

from flask import Blueprint

from memberhub.api.v1 import (
    auth,
    cells,
    departments,
    followups,
    health,
    members,
    users,
    zones,
)

API_VERSION = "v1"

# (blueprint, prefix below /api/v1); health sits at the version root
REGISTRY: list[tuple[Blueprint, str]] = [
    (health.bp, ""),
    (auth.bp, "auth"),
    (users.bp, "users"),
    (zones.bp, "zones"),
    (cells.bp, "cells"),
    (departments.bp, "departments"),
    (members.bp, "members"),
    (followups.bp, "followups"),
]
