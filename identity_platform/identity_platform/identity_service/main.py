from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from .config import settings
from .db import get_db, init_db
from .schemas import (
    UserCreate,
    UserLogin,
    BiometricLoginRequest,
    BiometricKeyUpdate,
    MessageResponse,
    UserDTO,
    ErrorResponse,
)
from .auth import PasswordHasher, TokenIssuer
from .errors import (
    IdentityServiceError,
    ClientError,
    ServerError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    BiometricKeyConflictError,
    UpdateFailedError,
    TokenIssuanceError,
    StoreError,
)
from .service import UserService
from .store import SqlAlchemyUserStore
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    DuplicateEmailError: 400,
    BiometricKeyConflictError: 400,
    InvalidCredentialsError: 401,
    NotFoundError: 404,
    UpdateFailedError: 500,
    TokenIssuanceError: 500,
    StoreError: 500,
    ClientError: 400,
    ServerError: 500,
}

app = FastAPI(title="Identity Service")

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def startup():
    init_db()


def status_code_for(exc: IdentityServiceError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 500


def error_response(request: Request, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            message=message,
            code=status_code,
            path=request.url.path,
            timestamp=datetime.utcnow().isoformat(),
        ).model_dump(),
    )


@app.exception_handler(IdentityServiceError)
async def identity_service_error_handler(request: Request, exc: IdentityServiceError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Request to %s failed: %s", request.url.path, exc.message)
    return error_response(request, exc.message, status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(request, "Internal server error", 500)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(SqlAlchemyUserStore(db), PasswordHasher(), TokenIssuer())


@app.post("/register", response_model=UserDTO)
def register(user: UserCreate, service: UserService = Depends(get_user_service)):
    return service.register(user.email, user.password)


@app.post("/login", response_model=UserDTO)
def login(credentials: UserLogin, service: UserService = Depends(get_user_service)):
    return service.login(credentials.email, credentials.password)


@app.post("/biometric-login", response_model=UserDTO)
def biometric_login(payload: BiometricLoginRequest, service: UserService = Depends(get_user_service)):
    return service.biometric_login(payload.biometric_key)


@app.post("/biometric-key", response_model=MessageResponse)
def update_biometric_key(payload: BiometricKeyUpdate, service: UserService = Depends(get_user_service)):
    service.update_biometric_key(payload.user_id, payload.biometric_key)
    return {"message": "Update Biometrics successfully"}


@app.get("/users/{user_id}", response_model=UserDTO)
def get_user_by_id(user_id: str, service: UserService = Depends(get_user_service)):
    return service.get_user_by_id(user_id)
