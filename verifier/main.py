from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from verifier.core.config import settings
from verifier.core.http_hardening import install_http_hardening
from verifier.api.public.router import router as public_router

app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_http_hardening(app)

app.include_router(public_router, prefix="/api/public")


@app.get("/health")
def health():
    return {"status": "ok", "service": settings.APP_NAME}
