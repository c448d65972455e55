"""
Feature modules.

- tracks: models, loaders, metadata aggregator
- annotations: smart marker rules and detection
- simulation: playback player and runner
- session: version-keyed cache tying them together
"""
