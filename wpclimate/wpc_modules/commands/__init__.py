"""Command catalog: metadata model, registry and factory."""
