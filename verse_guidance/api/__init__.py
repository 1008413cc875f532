"""FastAPI routes and endpoints.

Endpoints:
- GET /health: Service health status
- GET /ready: Readiness probe (engine constructed)
- POST /v1/guidance/goal: Best passage for a goal
- POST /v1/guidance/goal/more: Load more passages for a goal
- GET /v1/guidance/themes/{theme}: Thematic collection
- GET /v1/guidance/daily: Daily passage
- POST /v1/guidance/recommendation: Personalized recommendation
"""
