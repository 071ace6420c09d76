"""HTTP adapter for the interview engine."""
