import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mesmtf.config import CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from mesmtf.errors import ValidationError
from mesmtf.rules.profiles import DISEASE_PROFILES
from mesmtf.routers import catalog, diagnosis, intake

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

app = FastAPI(title="MESMTF Diagnosis API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(diagnosis.router, prefix="/api/diagnosis", tags=["diagnosis"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["catalog"])
app.include_router(intake.router, prefix="/api/intake", tags=["intake"])


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": [{"field": exc.field, "message": exc.message}]},
    )


@app.get("/api/health")
async def health():
    return {"status": "ok", "profiles": len(DISEASE_PROFILES)}
