"""
FastAPI routers grouped by concern (session, people).

Each module exposes an APIRouter that create_app() includes. Services are read
from app.state so tests can swap them.
"""
