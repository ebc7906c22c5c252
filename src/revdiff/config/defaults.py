"""Starter .revdiff.toml template."""

DEFAULT_TOML = """\
# revdiff configuration
version = "1.0"

[api]
base_url = ""             # review API root, e.g. https://reviews.example.com/api
# token = ""              # prefer REVDIFF_API_TOKEN
timeout = 10.0

[git]
timeout = 30
fetch_timeout = 120
fetch_on_missing_commit = true

[repositories]
# <repo id> = "/path/to/checkout"

[mappings]
# file = "~/.revdiff/repo-mappings.yml"

[output]
format = "terminal"       # terminal | json

[logging]
level = "WARNING"         # DEBUG | INFO | WARNING | ERROR
"""
