"""Pass report schema and JSON writer."""
