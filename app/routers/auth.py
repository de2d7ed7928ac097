from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.errors import envelope
from app.schemas import LoginRequest, RegisterRequest
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=201)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    return envelope("User registered successfully", await auth_service.register(db, data))

@router.post("/login")
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    return envelope("Login successful", await auth_service.login(db, data))
