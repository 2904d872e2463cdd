"""Engagement notification engine: scheduled push sweeps and manual broadcasts."""
