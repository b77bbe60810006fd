"""
Core business logic

This package holds the game itself:
- GameEngine: the per-channel state machine (the only place state changes)
- Catalog: the album reference data and its shared traversal direction
- Repository: the persistence contract and its adapters
- ChannelManager: channel registration per guild
- Locks: concurrency helpers
"""
