"""dbmeta: Firebird schema metadata export and transactional script replay."""

__version__ = "0.3.0"
