"""Engine settings: schema, defaults and the persistent manager."""
