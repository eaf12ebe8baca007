"""One-time share link backend."""
