"""Index artifact serialisation."""
