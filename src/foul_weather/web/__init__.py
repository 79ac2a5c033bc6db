# ABOUTME: Web package for the dispatcher HTTP surface.
# ABOUTME: FastAPI app, routes, dependencies and OIDC middleware.
