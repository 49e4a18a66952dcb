"""Output reporters — terminal (Rich) and JSON."""
