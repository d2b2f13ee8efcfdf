"""Candidate/job matching and profile completeness scoring."""

__version__ = "0.1.0"
