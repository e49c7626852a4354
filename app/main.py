import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import (
    DEBUG,
    APP_HOST,
    APP_PORT,
    LOG_LEVEL,
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    ADMIN_NAME,
    LEASE_EXPIRY_JOB_ENABLED,
)
from database.init import Base, SessionLocal, engine
from routes import (
    auth_routes,
    unit_routes,
    rental_request_routes,
    lease_routes,
)
from services.auth_service import ensure_admin
from services.background_tasks import LeaseExpiryScheduler

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def bootstrap_admin():
    if not (ADMIN_EMAIL and ADMIN_PASSWORD):
        return
    db = SessionLocal()
    try:
        admin = ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_NAME, db)
        logger.info("Administrator %s ready", admin.email)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    bootstrap_admin()

    scheduler = None
    if LEASE_EXPIRY_JOB_ENABLED:
        scheduler = LeaseExpiryScheduler()
        scheduler.start()
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown()


app = FastAPI(title="Apartment Booking API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(unit_routes.router)
app.include_router(rental_request_routes.router)
app.include_router(lease_routes.router)


@app.get("/")
def read_root():
    return {"name": "Apartment Booking API", "version": "1.0.0"}


if __name__ == "__main__":
    uvicorn.run("main:app", host=APP_HOST, port=APP_PORT, reload=DEBUG)
