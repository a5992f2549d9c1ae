"""Output reporters."""
