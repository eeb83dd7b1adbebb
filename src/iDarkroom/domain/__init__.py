"""Edit-state value objects and their persisted schema."""
