"""Data models shared by the pipeline."""
