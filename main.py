# main.py
import sys
from pathlib import Path
from fastapi import FastAPI, Request, Form, Depends
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from jose import jwt, JOSEError
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
import models

ROOT_DIR = Path(__file__).resolve().parent
sys.path.append(str(ROOT_DIR))

from config import settings
from database import engine, Base, get_db
from routes import collections, catalog
from utils import get_logger

load_dotenv()

logger = get_logger("app")

app = FastAPI(title="Collections Admin")

Base.metadata.create_all(bind=engine)

SECRET_KEY = settings.jwt_secret_key
ALGORITHM = "HS256"
TOKEN_COOKIE = "access_token"
PUBLIC_PATHS = ["/login", "/health", "/docs", "/openapi.json"]


def create_access_token(username: str, expires_in: timedelta = timedelta(days=1)) -> str:
    payload = {"sub": username, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


@app.post("/login")
async def login(username: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    user = db.query(models.User).filter_by(username=username).first()
    if not user or not user.verify_password(password):
        logger.info("Rejected login for username=%r", username)
        return JSONResponse(status_code=401, content={"error": "Invalid username or password"})
    response = JSONResponse(content={"success": True})
    response.set_cookie(key=TOKEN_COOKIE, value=create_access_token(user.username), httponly=True,
                        samesite="lax", max_age=86400, secure=True)
    return response

@app.middleware("http")
async def require_login(request: Request, call_next):
    if any(request.url.path.startswith(path) for path in PUBLIC_PATHS):
        return await call_next(request)
    token = request.cookies.get(TOKEN_COOKIE)
    if not token:
        return JSONResponse(status_code=401, content={"detail": "Not authenticated"})
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        request.state.user = payload.get("sub")
    except JOSEError:
        response = JSONResponse(status_code=401, content={"detail": "Session expired"})
        response.delete_cookie(TOKEN_COOKIE)
        return response
    return await call_next(request)

@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}

# Routers
app.include_router(collections.router)
app.include_router(catalog.router)
