"""Registry — client and data model for the remote module registry.

The registry provides:
- Commits: look up the commit a track points at, with its tags
- Push: upload module content onto one or more tracks
- Repositories: resolve a repository by its full name
- Tags and tracks: create tags, delete tracks
"""
