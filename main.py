from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from config import settings
from core.errors import MacroError
from api.v1.router import api_router


app = FastAPI(title="Macro Tracker API", version="1.0.0")

# CORS (public demo only – lock down in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(MacroError)
async def macro_error_handler(request: Request, exc: MacroError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, **exc.details},
    )


@app.get("/health", tags=["meta"])
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.env_name}
