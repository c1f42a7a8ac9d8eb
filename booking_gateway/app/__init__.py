"""
Booking Gateway application package.

The gateway fronts the booking site's browser calls to the upstream REST API:
- Credentials: bearer token taken from the Authorization header or cookie
- Forwarding: one httpx call per request, JSON or raw multipart body
- Normalization: every upstream answer becomes a {success, message, data} envelope
- Room assets: unreliable image references are swapped for a fixed fallback

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.adapters: HTTP client for the upstream API.
- app.domain: Credential extraction, normalization, error classification,
  room asset policy, and the per-route handler.
"""
