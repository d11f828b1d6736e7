"""
Games module - Card content built on the engine.

Each game has its own subpackage with:
- Card data
- Dogma effect programs
- Effect registry factory
- Snapshot builders
"""
