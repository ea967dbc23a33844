"""WP-CLI command family."""
from wpclimate.wpc_modules.commands.types import (
    CallingConvention,
    CommandFamily,
    CommandGroup,
    CommandSpec,
)
from wpclimate.wpc_modules.wp.base import WpCommand
from wpclimate.wpc_modules.wp.database import (
    CheckDbCommand,
    ExportDbCommand,
    ImportDbCommand,
    RepairDbCommand,
)
from wpclimate.wpc_modules.wp.maintenance import (
    FlushCachesCommand,
    FlushTransientCommand,
    RewriteFlushCommand,
)
from wpclimate.wpc_modules.wp.search_replace import SearchReplaceCommand

WP_FAMILY = CommandFamily(
    group=CommandGroup.WP,
    base=WpCommand,
    commands=(
        CommandSpec(
            "search-replace",
            SearchReplaceCommand,
            CallingConvention.TYPED,
            "Search and replace text in the database",
        ),
        CommandSpec(
            "flush-transient",
            FlushTransientCommand,
            CallingConvention.CONTEXT_ONLY,
            "Delete all transients",
        ),
        CommandSpec(
            "flush-caches",
            FlushCachesCommand,
            CallingConvention.CONTEXT_ONLY,
            "Flush the object cache",
        ),
        CommandSpec(
            "rewrite-flush",
            RewriteFlushCommand,
            CallingConvention.CONTEXT_ONLY,
            "Regenerate rewrite rules",
        ),
        CommandSpec(
            "check-db",
            CheckDbCommand,
            CallingConvention.CONTEXT_ONLY,
            "Check the database tables",
        ),
        CommandSpec(
            "repair-db",
            RepairDbCommand,
            CallingConvention.CONTEXT_ONLY,
            "Repair the database tables",
        ),
        CommandSpec(
            "export-db",
            ExportDbCommand,
            CallingConvention.BAG,
            "Export the database to the dump directory",
        ),
        CommandSpec(
            "import-db",
            ImportDbCommand,
            CallingConvention.BAG,
            "Import an SQL dump",
        ),
    ),
)

__all__ = ["WP_FAMILY", "WpCommand"]
