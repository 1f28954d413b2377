import hmac
import logging
import os
import secrets
import time
from contextlib import asynccontextmanager
from typing import Optional, List, Iterable

from fastapi import FastAPI, HTTPException, Depends, Header, Request, UploadFile, File
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import (
    DATABASE_NAME,
    create_document,
    ensure_indexes,
    delete_document,
    find_document,
    get_db,
    get_document,
    get_documents,
    serialize,
    update_document,
)
from schemas import (
    BulkQuote,
    Course,
    CourseLevel,
    Hire,
    Login,
    Project,
    ProjectCategory,
    Session,
    SessionStatus,
    SiteStats,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)

# Environment
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_PREFIX = "/uploads"
SESSION_STATUSES = SessionStatus.__args__
# optional fields an edit may clear with null
NULLABLE_FIELDS = {"badge"}

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    logger.info("Uploads stored in %s", os.path.abspath(UPLOAD_DIR))
    if not os.getenv("DATABASE_URL"):
        logger.warning("DATABASE_URL is not set, using the local default")
    try:
        ensure_indexes()
    except PyMongoError:
        logger.exception("Could not create indexes on %s", DATABASE_NAME)
    yield


app = FastAPI(title="Site API", version="1.0.0", lifespan=lifespan)

# CORS
frontend_url = os.getenv("FRONTEND_URL", "*")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*" if frontend_url == "*" else frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


# ---------------------- Error rendering ----------------------
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(PyMongoError)
async def store_error(request: Request, exc: PyMongoError):
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    # Raw store message goes back to the caller
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ---------------------- Admin gate ----------------------
def get_admin_password() -> str:
    return ADMIN_PASSWORD


def get_upload_dir() -> str:
    return UPLOAD_DIR


def require_admin(
    x_admin_password: Optional[str] = Header(None),
    secret: str = Depends(get_admin_password),
) -> None:
    if not x_admin_password or not hmac.compare_digest(x_admin_password.encode(), secret.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized (admin password required)")


# ---------------------- Helpers ----------------------
def require_fields(payload: BaseModel, fields: Iterable[str], message: str = "All fields are required") -> dict:
    data = payload.model_dump()
    if not all(data.get(f) for f in fields):
        raise HTTPException(status_code=400, detail=message)
    return data


def list_collection(name: str, sort) -> List[dict]:
    return [serialize(d) for d in get_documents(name, sort=sort)]


def delete_or_404(name: str, doc_id: str, label: str) -> dict:
    doc = delete_document(name, doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    logger.info("Deleted %s %s", name, doc_id)
    return serialize(doc)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


# ---------------------- Health ----------------------
@app.get("/")
def read_root():
    return {"message": "Site API running"}


@app.get("/test")
def test_connection():
    try:
        collections = get_db().list_collection_names()
        return {"backend": "ok", "database": "ok", "database_name": DATABASE_NAME, "collections": collections}
    except PyMongoError as e:
        return {"backend": "ok", "database": "error", "error": str(e), "database_name": DATABASE_NAME}


# ---------------------- Upload ----------------------
@app.post("/api/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    upload_dir: str = Depends(get_upload_dir),
    _: None = Depends(require_admin),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    suffix = os.path.splitext(image.filename)[1]
    fname = f"img-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{suffix}"
    dest = os.path.join(upload_dir, fname)
    with open(dest, "wb") as f:
        f.write(await image.read())
    logger.info("Stored upload %s as %s", image.filename, fname)
    return {"url": f"{UPLOAD_PREFIX}/{fname}"}


@app.get(UPLOAD_PREFIX + "/{name}")
def get_upload(name: str, upload_dir: str = Depends(get_upload_dir)):
    path = os.path.join(upload_dir, os.path.basename(name))
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path)


# ---------------------- Users ----------------------
class RegisterPayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    mobile: Optional[str] = None


class LoginPayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    identifier: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    password: Optional[str] = None


@app.post("/api/register")
def register(payload: RegisterPayload):
    data = require_fields(payload, ("name", "email", "password", "mobile"))
    if find_document("user", {"email": data["email"]}):
        raise HTTPException(status_code=400, detail="Email already exists")
    user = User(name=data["name"], email=data["email"], password=hash_password(data["password"]), mobile=data["mobile"])
    try:
        doc = create_document("user", user)
    except DuplicateKeyError:
        # lost the race against a concurrent registration
        raise HTTPException(status_code=400, detail="Email already exists")
    logger.info("Registered user %s", doc["email"])
    return {"message": "Registration successful", "user": serialize(doc)}


@app.post("/api/login")
def login(payload: LoginPayload, request: Request):
    data = require_fields(payload, ("identifier", "password"), "Email/Mobile and password required")
    identifier = data["identifier"]
    candidates = get_documents("user", {"$or": [{"email": identifier}, {"mobile": identifier}]}, sort=[("createdAt", 1)])
    user = next((u for u in candidates if verify_password(data["password"], u.get("password", ""))), None)
    if user is None:
        logger.info("Failed login for %s", identifier)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    create_document(
        "login",
        Login(userId=user["_id"], name=user["name"], email=user["email"], ip=request.client.host if request.client else None),
    )
    logger.info("User %s logged in", user["email"])
    return {"message": "Login successful", "user": serialize(user)}


@app.post("/api/update-profile")
def update_profile(payload: ProfileUpdate):
    if not payload.id:
        raise HTTPException(status_code=400, detail="User ID required")
    user = get_document("user", payload.id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if payload.email and payload.email != user["email"]:
        if find_document("user", {"email": payload.email, "_id": {"$ne": user["_id"]}}):
            raise HTTPException(status_code=400, detail="Email already exists")

    changes = {k: v for k, v in payload.model_dump(exclude={"id"}).items() if v}
    if "password" in changes:
        changes["password"] = hash_password(changes["password"])
    try:
        updated = update_document("user", user["_id"], changes)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already exists")
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Profile updated successfully", "user": serialize(updated)}


@app.get("/api/users")
def list_users(_: None = Depends(require_admin)):
    return {"users": list_collection("user", [("createdAt", DESCENDING)])}


@app.delete("/api/users/{user_id}")
def delete_user(user_id: str, _: None = Depends(require_admin)):
    return {"message": "User deleted", "user": delete_or_404("user", user_id, "User")}


@app.get("/api/logins")
def list_logins(_: None = Depends(require_admin)):
    return {"logins": list_collection("login", [("loggedAt", DESCENDING)])}


@app.delete("/api/logins/{login_id}")
def delete_login(login_id: str, _: None = Depends(require_admin)):
    return {"message": "Login record deleted", "login": delete_or_404("login", login_id, "Login record")}


@app.get("/api/stats")
def site_stats(_: None = Depends(require_admin)):
    doc = find_document("sitestats", {})
    stats = SiteStats(**{k: v for k, v in doc.items() if k != "_id"}) if doc else SiteStats()
    return stats.model_dump()


# ---------------------- Sessions ----------------------
class SessionIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    sessionType: Optional[str] = None
    sessionMessage: Optional[str] = None


class SessionStatusUpdate(BaseModel):
    status: Optional[str] = None


@app.post("/api/sessions")
def book_session(payload: SessionIn):
    data = require_fields(payload, ("name", "email", "phone", "sessionType", "sessionMessage"))
    doc = create_document("session", Session(**data))
    return {"message": "Session booked successfully", "session": serialize(doc)}


@app.get("/api/sessions")
def list_sessions(_: None = Depends(require_admin)):
    return {"sessions": list_collection("session", [("bookedAt", DESCENDING)])}


@app.get("/api/sessions/{session_id}")
def get_session(session_id: str):
    doc = get_document("session", session_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"session": serialize(doc)}


@app.put("/api/sessions/{session_id}")
def update_session(session_id: str, payload: SessionStatusUpdate):
    if not payload.status:
        raise HTTPException(status_code=400, detail="Status required")
    if payload.status not in SESSION_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    doc = update_document("session", session_id, {"status": payload.status, "updatedAt": utcnow()})
    if not doc:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Session updated", "session": serialize(doc)}


@app.delete("/api/sessions/{session_id}")
def delete_session(session_id: str, _: None = Depends(require_admin)):
    return {"message": "Session deleted", "session": delete_or_404("session", session_id, "Session")}


# ---------------------- Hires ----------------------
class HireIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None


@app.post("/api/hires")
def request_hire(payload: HireIn):
    data = require_fields(payload, ("name", "email", "phone", "message"))
    doc = create_document("hire", Hire(**data))
    return {"message": "Hire request submitted", "hire": serialize(doc)}


@app.get("/api/hires")
def list_hires(_: None = Depends(require_admin)):
    return {"hires": list_collection("hire", [("createdAt", DESCENDING)])}


@app.delete("/api/hires/{hire_id}")
def delete_hire(hire_id: str, _: None = Depends(require_admin)):
    return {"message": "Hire deleted", "hire": delete_or_404("hire", hire_id, "Hire")}


# ---------------------- Bulk quotes ----------------------
class BulkQuoteIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    organization: Optional[str] = None
    count: Optional[int] = None
    requirements: Optional[str] = None


@app.post("/api/bulk-quotes")
def request_bulk_quote(payload: BulkQuoteIn):
    data = require_fields(payload, ("name", "email", "phone", "count", "requirements"), "All required fields are missing")
    doc = create_document("bulkquote", BulkQuote(**data))
    return {"message": "Bulk quote submitted", "quote": serialize(doc)}


@app.get("/api/bulk-quotes")
def list_bulk_quotes(_: None = Depends(require_admin)):
    return {"bulkQuotes": list_collection("bulkquote", [("requestedAt", DESCENDING)])}


@app.delete("/api/bulk-quotes/{quote_id}")
def delete_bulk_quote(quote_id: str, _: None = Depends(require_admin)):
    return {"message": "Bulk quote deleted", "quote": delete_or_404("bulkquote", quote_id, "Bulk quote")}


# ---------------------- Projects ----------------------
class ProjectCreate(BaseModel):
    title: str
    category: ProjectCategory
    image: str
    description: str
    tags: List[str] = []
    link: str = "#contact"
    badge: Optional[str] = None
    featured: bool = False
    priority: int = 0


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    category: Optional[ProjectCategory] = None
    image: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    link: Optional[str] = None
    badge: Optional[str] = None
    featured: Optional[bool] = None
    priority: Optional[int] = None


@app.get("/api/projects")
def list_projects():
    return {"projects": list_collection("project", [("priority", DESCENDING), ("createdAt", DESCENDING)])}


@app.post("/api/projects")
def create_project(item: ProjectCreate, _: None = Depends(require_admin)):
    doc = create_document("project", Project(**item.model_dump()))
    return {"message": "Project added", "project": serialize(doc)}


@app.put("/api/projects/{project_id}")
def update_project(project_id: str, item: ProjectUpdate, _: None = Depends(require_admin)):
    changes = {k: v for k, v in item.model_dump(exclude_unset=True).items() if v is not None or k in NULLABLE_FIELDS}
    doc = update_document("project", project_id, changes)
    if not doc:
        raise HTTPException(status_code=404, detail="Project not found")
    return {"message": "Project updated", "project": serialize(doc)}


@app.delete("/api/projects/{project_id}")
def delete_project(project_id: str, _: None = Depends(require_admin)):
    return {"message": "Project deleted", "project": delete_or_404("project", project_id, "Project")}


# ---------------------- Courses ----------------------
class CourseCreate(BaseModel):
    title: str
    level: CourseLevel
    description: str
    duration: str
    features: List[str] = []
    sessionType: str = "training-demo"
    badge: Optional[str] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    level: Optional[CourseLevel] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    features: Optional[List[str]] = None
    sessionType: Optional[str] = None
    badge: Optional[str] = None


@app.get("/api/courses")
def list_courses():
    return {"courses": list_collection("course", [("createdAt", DESCENDING)])}


@app.post("/api/courses")
def create_course(item: CourseCreate, _: None = Depends(require_admin)):
    doc = create_document("course", Course(**item.model_dump()))
    return {"message": "Course added", "course": serialize(doc)}


@app.put("/api/courses/{course_id}")
def update_course(course_id: str, item: CourseUpdate, _: None = Depends(require_admin)):
    changes = {k: v for k, v in item.model_dump(exclude_unset=True).items() if v is not None or k in NULLABLE_FIELDS}
    doc = update_document("course", course_id, changes)
    if not doc:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"message": "Course updated", "course": serialize(doc)}


@app.delete("/api/courses/{course_id}")
def delete_course(course_id: str, _: None = Depends(require_admin)):
    return {"message": "Course deleted", "course": delete_or_404("course", course_id, "Course")}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
