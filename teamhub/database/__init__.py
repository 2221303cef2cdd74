"""
The `database` package owns every interaction with the relational store of
TeamHub: settings and engine, entity definitions, data access and the
transactional service layer the routers and the real-time layer call.

Contents:
    - config:
        Settings and the SQLAlchemy engine / declarative base.

    - entities:
        ORM models for teams, users, projects, notes, chat and notifications.

    - daos:
        Data Access Objects wrapping the queries for each entity group.

    - core:
        `@transactional` service functions that validate input, enforce
        permissions and return Pydantic read models.

    - helpers:
        Transaction decorator, session context and UTC time helpers.
"""
