"""GitHub REST client used for commit comparisons."""
