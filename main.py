from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS
from database.connection import Base, engine
import models  # registers every model on Base.metadata
from utils.errors import setup_error_handlers
from utils.logging_utils import log_error, log_event
from utils.rate_limiter import setup_rate_limiting


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        Base.metadata.create_all(bind=engine)
        log_event("startup", "system", "Tables ready")
    except Exception as e:
        log_error("startup", "system", "Could not create tables", str(e))
        raise
    yield


app = FastAPI(title="Hotel PMS API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_rate_limiting(app)
setup_error_handlers(app)

from endpoints import (  # noqa: E402
    auth, availability, bookings, extras, guests, payments, room_types, rooms, users
)
app.include_router(auth.router)
app.include_router(bookings.router)
app.include_router(payments.router)
app.include_router(availability.router)
app.include_router(room_types.router)
app.include_router(rooms.router)
app.include_router(guests.router)
app.include_router(extras.router)
app.include_router(users.router)


@app.get("/")
def read_root():
    return {"message": "Hotel PMS API"}
