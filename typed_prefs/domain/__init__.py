"""Domain layer - value kinds, setting definitions and errors."""
