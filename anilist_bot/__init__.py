"""Discord bot that relays AniList list activity and statistics."""

__version__ = "1.0.0"
