# Pydantic request/response schemas for the dashboard API.
