"""Core generation logic: prompt building, parsing and orchestration."""
