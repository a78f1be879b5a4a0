"""Track sync — reconciling a local module snapshot with a registry track.

This package provides the primitives for:
- Track resolution: mapping the declared track and git refs to a registry track
- History comparison: classifying recorded commit tags against the current commit
- Reconciliation: deciding whether to push, skip, or repair tags
- Tag repair: tagging an existing registry commit after a duplicate push
- Track deletion: removing the track of a deleted branch
"""
