"""Domain vocabulary and repository protocols."""
