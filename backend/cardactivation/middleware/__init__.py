# Middleware package init
"""
Card Activation Backend — Middleware Package
=============================================

Middleware Chain (order matters):
    Request → [Request ID] → [Client IP] → [Logging] → [CORS] → Route Handler

    1. Request ID first so every later log line can carry it
    2. Client IP annotates request.state.client_ip for logging and audit
    3. Logging measures the full handler duration and final status
"""
