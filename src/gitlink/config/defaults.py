"""Starter .gitlink.toml template."""

DEFAULT_TOML = """\
# gitlink configuration
version = "1.0"

[scan]
max_file_size = 2000000   # bytes; larger files are skipped
workers = 0               # 0 = one worker per CPU
overlap = "collapse"      # collapse | report (one finding per literal, or one per detector)

[entropy]
enabled = true
min_entropy = 4.5
min_length = 20

[patterns]
# enable = ["AWS_ACCESS_KEY", "PRIVATE_KEY"]   # empty = all enabled
# disable = ["GENERIC_API_KEY"]

[history]
enabled = false
# since_days = 90
strategy = "diff"         # diff | tree
merges = "skip"           # skip | first-parent

[fingerprint]
mode = "positional"       # positional | content (ignores line number)

[output]
format = "terminal"       # terminal | json
show_summary = true
"""
