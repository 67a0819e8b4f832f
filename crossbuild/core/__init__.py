"""Build primitives: platforms, version resolution, env merging, actions."""
