"""Host configuration — pilot.toml, env vars, logging."""
