# echo_insight/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .middleware_logging import register_request_logging
from .error_handlers import register_error_handlers

from echo_insight.routers.health import router as health_router
from echo_insight.routers.insight_api import router as insight_router
from echo_insight.routers.prewarm import router as prewarm_router

settings = get_settings()

# =========================
# ---- App Init ----
# =========================
app = FastAPI(title="Echo Insight", version="0.1.0")
register_request_logging(app)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": "Echo Insight: upload a 1920x1080 showcase to POST /insight/analyze"}


app.include_router(insight_router)
app.include_router(health_router)
app.include_router(prewarm_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("echo_insight.main:app", host="0.0.0.0", port=settings.PORT)
