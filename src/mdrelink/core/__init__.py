"""Pure link-rewrite engine: paths, scanning, planning, and edit application."""
