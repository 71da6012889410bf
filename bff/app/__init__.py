"""
Marketplace BFF
===============

Backend-for-frontend service for the property marketplace web client.

Packages:
    - proxy     : Route table, BackendForwarder and the /api router
    - payments  : Payment intent creation against the payment processor
    - utils     : Slug, address and currency helpers

Entry point: ``bff.app.main:create_app``.
"""
