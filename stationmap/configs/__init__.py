"""Settings and logging setup shared by the Dash app and the CLI."""
