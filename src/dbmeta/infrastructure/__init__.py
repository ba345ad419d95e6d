"""Infrastructure layer: database engines, the system catalog and script files."""
