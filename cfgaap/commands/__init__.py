"""Click command groups for the cfgaap CLI."""
