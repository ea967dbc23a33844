"""Core modules for the WP-CLI / Git workflow engine."""
