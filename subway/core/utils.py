"""Core utility functions."""

# async driver -> sync driver used by Alembic
_SYNC_DRIVERS = {
    "+asyncpg": "+psycopg",
    "+aiosqlite": "",
}


def convert_async_db_url_to_sync(database_url: str) -> str:
    """
    Convert an async database URL to a sync database URL.

    Only the scheme is touched; the rest of the URL is kept verbatim.

    Examples:
        >>> convert_async_db_url_to_sync("postgresql+asyncpg://u:p@db/subway")
        'postgresql+psycopg://u:p@db/subway'
        >>> convert_async_db_url_to_sync("sqlite+aiosqlite:///subway.db")
        'sqlite:///subway.db'
    """
    scheme, separator, rest = database_url.partition("://")
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        if async_driver in scheme:
            return scheme.replace(async_driver, sync_driver) + separator + rest
    return database_url
