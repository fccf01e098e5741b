"""
Basic usage example of fastapi-request-context.

Demonstrates:
- Building a RequestContext as a FastAPI dependency
- Reading path parameters, headers and the client address
- Turning accessor failures into 400/413 responses
"""

from fastapi import Depends, FastAPI

from fastapi_request_context import (
    RequestContext,
    context_dependency,
    register_exception_handlers,
)

app = FastAPI(title="Basic Request Context Example")
register_exception_handlers(app)


@app.get("/")
async def public_endpoint():
    """Plain endpoint - no context needed."""
    return {"message": "Hello, World!"}


@app.get("/users/{user_id}")
async def get_user(ctx: RequestContext = Depends(context_dependency())):
    """Path parameter and raw headers, no schemas involved."""
    return {
        "user_id": ctx.param("user_id"),
        "method": ctx.method,
        "client": ctx.ip,
        "user_agent": ctx.headers.get("user-agent"),
    }


@app.post("/echo")
async def echo(ctx: RequestContext = Depends(context_dependency())):
    """Best-effort raw body read; None when the body arrives too slowly."""
    data = await ctx.blob(deadline=1000)
    return {"size": None if data is None else len(data)}


if __name__ == "__main__":
    import uvicorn

    print("Starting server at http://localhost:8000")
    print("\nTry these requests:")
    print("  curl http://localhost:8000/users/42")
    print("  curl -X POST http://localhost:8000/echo -d 'hello'")

    uvicorn.run(app, host="0.0.0.0", port=8000)
