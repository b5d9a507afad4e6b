"""Static sub-commands for the hookscript CLI."""
