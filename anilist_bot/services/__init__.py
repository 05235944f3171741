from .anilist_client import AniListClient

__all__ = ["AniListClient"]
