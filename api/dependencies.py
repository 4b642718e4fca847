"""
FastAPI dependencies: per-request database session.
"""
from fastapi import HTTPException, Request


def get_session(request: Request):
    """Yield a session from the factory the app lifespan put on app.state."""
    session_factory = getattr(request.app.state, 'Session', None)
    if session_factory is None:
        raise HTTPException(503, "Server not initialized yet")
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
