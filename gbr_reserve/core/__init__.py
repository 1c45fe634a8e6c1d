"""Core settings, logging and error tracking."""
