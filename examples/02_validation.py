"""
Schema validation example.

Demonstrates:
- One SchemaBundle per route with pydantic-backed schemas
- JSON-coerced query strings (?tags=["a","b"]&limit=5)
- Text bodies selected by a string-shaped schema
- Multipart uploads flattened with transform=True
"""

from typing import Literal

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from fastapi_request_context import (
    PydanticSchema,
    RequestContext,
    SchemaBundle,
    SchemaShape,
    context_dependency,
    register_exception_handlers,
)

app = FastAPI(title="Validation Example")
register_exception_handlers(app)


class Search(BaseModel):
    tags: list[str] = []
    limit: int = Field(default=20, le=100)
    archived: bool = False


class NewNote(BaseModel):
    title: str
    body: str = ""


class Session(BaseModel):
    session: str


search_context = context_dependency(SchemaBundle(query=PydanticSchema(Search)))

note_context = context_dependency(
    SchemaBundle(
        body=PydanticSchema(NewNote),
        cookies=PydanticSchema(Session),
    )
)

status_context = context_dependency(
    SchemaBundle(
        body=PydanticSchema(Literal["open", "closed"], shape=SchemaShape.STRING)
    )
)

upload_context = context_dependency(
    SchemaBundle(body=PydanticSchema(NewNote), transform=True)
)


@app.get("/notes")
async def search_notes(ctx: RequestContext = Depends(search_context)):
    """`?archived` alone means archived=true."""
    return ctx.query


@app.post("/notes")
async def create_note(ctx: RequestContext = Depends(note_context)):
    """JSON body plus a `cookies: session=...` header."""
    note = await ctx.body()
    return {"owner": ctx.cookies.session, "note": note}


@app.put("/notes/{note_id}/status")
async def set_status(ctx: RequestContext = Depends(status_context)):
    """The body is plain text because the schema is declared string-shaped."""
    return {"id": ctx.param("note_id"), "status": await ctx.body()}


@app.post("/notes/upload")
async def upload_note(ctx: RequestContext = Depends(upload_context)):
    """multipart/form-data fields validated as a NewNote."""
    return await ctx.body()


if __name__ == "__main__":
    import uvicorn

    print("Starting server at http://localhost:8000")
    print("\nTry these requests:")
    print("  curl 'http://localhost:8000/notes?tags=%5B%22a%22%5D&limit=5&archived'")
    print(
        "  curl -X POST http://localhost:8000/notes -H 'cookies: session=abc' "
        "-d '{\"title\": \"hi\"}'"
    )
    print("  curl -X PUT http://localhost:8000/notes/1/status -d 'closed'")
    print("  curl -X POST http://localhost:8000/notes/upload -F title=hi -F body=text")

    uvicorn.run(app, host="0.0.0.0", port=8000)
