"""Face detection and model lifecycle."""
