"""Reference adapters for the corpus and edit sink ports."""
