"""bl subcommands."""
