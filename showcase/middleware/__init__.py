# Middleware package init
"""
Showcase Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: reject abusive clients before any work
    2. Request ID: correlation id for logs and the X-Request-ID header
    3. Logging: method, path, status and duration per request

The role gate (role_gate.py) is not ASGI middleware. It is a FastAPI
dependency attached to the routes that need an admin caller.
"""
