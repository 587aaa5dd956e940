"""Bot bootstrap: client class, startup helpers and CLI."""
