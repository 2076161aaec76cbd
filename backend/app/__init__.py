"""Live evaluation layer: settings and streaming services around core/."""
