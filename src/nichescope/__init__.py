"""nichescope - multi-agent niche and trend deliberation."""

__version__ = "1.0.0"
