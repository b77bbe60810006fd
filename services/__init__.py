"""
Service layer

This package holds pure calculation logic and never changes game state:
- SimilarityService: fuzzy matching for album and song names
- TextService: normalization of raw chat messages
- StatsService: player statistics
"""
