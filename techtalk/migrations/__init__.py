"""
Schema migrations for the tech talk store.

Each module is named M<NNN>_<description>.py and exposes
get_migration_version() and upgrade(conn).
"""
