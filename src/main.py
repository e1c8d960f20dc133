from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.kiteauth.router import router as auth_router

settings.init_sentry()

app = FastAPI(
    title="Kite Token Exchange Service",
    description="Service for Kite Connect login and session token exchange",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(auth_router)
