"""Microblog model layer: users, microposts and the follow graph."""

__version__ = "0.1.0"
