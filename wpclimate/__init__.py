"""wpclimate: run ordered WP-CLI and Git workflows."""
