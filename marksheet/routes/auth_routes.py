from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from marksheet.core.database import USERS, get_database
from marksheet.core.logger import get_logger
from marksheet.core.security import (
    get_current_active_user,
    get_password_hash,
    is_password_hash,
    require_role,
    token_for_user,
    verify_password,
)
from marksheet.models.user_schemas import (
    LoginResponse,
    RegisterResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from marksheet.utils.helpers import serialize_doc, utcnow

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
logger = get_logger("auth")


@router.post("/login", response_model=LoginResponse)
def login(credentials: UserLogin, db: Database = Depends(get_database)):
    users = db[USERS]
    user = users.find_one({"email": credentials.email})
    if not user or not verify_password(credentials.password, user.get("password")):
        logger.warning("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    # Legacy plaintext password matched: store the hash from now on
    if not is_password_hash(user.get("password")):
        try:
            users.update_one(
                {"_id": user["_id"]},
                {"$set": {"password": get_password_hash(credentials.password), "updated_at": utcnow()}},
            )
            logger.info("Migrated plaintext password for %s", user["email"])
        except PyMongoError as e:
            logger.warning("Password migration failed for %s: %s", user["email"], e)

    logger.info("User %s logged in as %s", user["email"], user["role"])
    return LoginResponse(
        message="Login successful",
        token=token_for_user(user),
        user=UserResponse(**serialize_doc(user)),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Database = Depends(get_database)):
    users = db[USERS]
    if users.find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="User already exists")

    now = utcnow()
    user_doc = {
        "name": payload.name,
        "email": payload.email,
        "password": get_password_hash(payload.password),
        "role": payload.role.value,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = users.insert_one(user_doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    user_doc["_id"] = result.inserted_id

    logger.info("Registered %s with role %s", payload.email, payload.role.value)
    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse(**serialize_doc(user_doc)),
    )


@router.get("/me", response_model=UserResponse)
def get_me(current_user: dict = Depends(get_current_active_user)):
    return UserResponse(**serialize_doc(current_user))


@router.get("/users", response_model=list[UserResponse])
def get_all_users(
    db: Database = Depends(get_database),
    current_user: dict = Depends(require_role(["admin"])),
):
    """
    Endpoint for Admins to fetch every account in the system.
    """
    return [UserResponse(**serialize_doc(doc)) for doc in db[USERS].find({})]
