"""
TeamHub backend: teams, projects, versioned notes, status history, chat and
presence over FastAPI, SQLAlchemy and WebSockets.
"""
