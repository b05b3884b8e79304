"""Chain lifecycle: enumerate, flush and delete chains on the live subsystem."""
