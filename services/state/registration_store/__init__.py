"""Registration Store Service package."""
