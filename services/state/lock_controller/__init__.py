"""Lock Controller Service package."""
