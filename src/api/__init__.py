"""HTTP API for resource listing, filter metadata and presets."""
