"""Domain layer: the schema model, DDL rendering and script splitting.

Nothing here touches a database, the filesystem, or the CLI.
"""
