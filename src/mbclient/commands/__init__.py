"""Built-in sub-commands for the ``mbclient`` CLI."""
