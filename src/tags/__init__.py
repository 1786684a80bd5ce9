"""Tag extraction and validation for indexed media files."""
