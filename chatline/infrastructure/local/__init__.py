"""Local (SQLite / in-process) infrastructure implementations."""
