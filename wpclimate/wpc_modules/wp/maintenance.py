"""Cache, transient and rewrite maintenance commands."""
from __future__ import annotations

from wpclimate.wpc_modules.wp.base import FixedWpCommand


class FlushTransientCommand(FixedWpCommand):
    arguments = ("transient", "delete", "--all")


class FlushCachesCommand(FixedWpCommand):
    arguments = ("cache", "flush")


class RewriteFlushCommand(FixedWpCommand):
    arguments = ("rewrite", "flush")
