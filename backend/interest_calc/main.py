from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interest_calc.core.config import settings
from interest_calc.core.logging import setup_logging
from interest_calc.api.routes.ledger import router as ledger_router

setup_logging(settings.log_level)

app = FastAPI(title="Simple Interest Calculator")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(ledger_router)
