"""Reference CPU execution of pixel transform descriptions."""
