"""CLI module for deviceservice."""
