import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import accounting, invoices, leases, properties, regularisations, statements
from app.db.database import init_db

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    init_db()
    yield


app = FastAPI(
    title="Gestion Locative API",
    description="Gestion locative : honoraires, reversements, prorata, régularisation des charges, comptes rendus de gestion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(properties.router, prefix="/api/properties", tags=["properties"])
app.include_router(leases.router, prefix="/api/leases", tags=["leases"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
app.include_router(accounting.router, prefix="/api/accounting", tags=["accounting"])
app.include_router(regularisations.router, prefix="/api/regularisations", tags=["regularisations"])
app.include_router(statements.router, prefix="/api/statements", tags=["statements"])


@app.get("/health")
def health_check():
    return {"status": "ok", "version": "0.1.0"}
