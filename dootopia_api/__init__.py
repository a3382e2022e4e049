"""
DooTopia API package.

A FastAPI service exposing the task/rewards document collections used by the
DooTopia mobile client, plus a small Python client for the same endpoints.
"""
