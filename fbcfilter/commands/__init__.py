"""CLI subcommands for fbc-filter."""
