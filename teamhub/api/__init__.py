"""
API Package — FastAPI Routers • Models • Errors • JWT Utils • Object Storage
===========================================================================

Mission
-------
This package defines the backend's HTTP interface and its support stack:
FastAPI routing, JWT auth, request/response contracts, the response envelope
and chat-image storage. The WebSocket side lives in `teamhub.realtime`.

Contents
--------
- fast_api
    Router for teams, users, departments and notifications:
      • Teams: register (team + leader), list members
      • Users: login, current user, leader-created accounts
      • Departments: create, list
      • Notifications: list, mark read, mark all read

- chat_api
    Router for chat rooms, members, messages and seen receipts
    (mutations go through the real-time fan-out).

- project_api
    Router for projects, phases, assignments, versioned notes and the
    project status history.

- models
    Pydantic data contracts (camelCase on the wire) for requests, reads and
    real-time payloads.

- errors
    `ApiError` and its subclasses (`BadRequest`, `Unauthorized`, `Forbidden`,
    `NotFound`, `Conflict`, `UploadFailed`).

- response
    `send_response` — the `{success, statusCode, message, meta, data}` envelope.

- deps
    `get_current_user`, `require_leader`, `get_chat` dependencies.

- utils
    JWT helpers:
      • create_access_token(payload) — issues signed JWTs with exp
      • verify_token(token) — validates JWTs and returns their claims

- aws_bucket_funcs
    S3-compatible (DigitalOcean Spaces) upload/delete of chat images.
"""
