"""Qt-facing state owners, workers and interaction controllers."""
