"""Command line tools for inspecting settings stores."""
