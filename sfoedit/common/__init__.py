"""Format model and shared helpers for PARAM.SFO files."""
