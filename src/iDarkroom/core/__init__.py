"""Pure numeric engines: coordinates, curves, tone, pipeline and geometry."""
