"""Authentication core and outbound services."""
