"""
The `config` package holds the settings and the SQLAlchemy bootstrap of TeamHub.

Contents:
    - config: `Settings` singleton loaded from environment variables (with .env support): database, JWT, object storage and background-job settings
    - connection_engine: builds the connection URL (`DATABASE_URL` or `DB_*` parts), creates the Engine, the shared MetaData and the declarative base every entity inherits from
"""
