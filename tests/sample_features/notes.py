"""Not a feature: no setup()."""

NOTES = ["loader skips modules without setup"]
