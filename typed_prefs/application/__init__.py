"""Application layer - typed settings, serialization strategies and notifications."""
