from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, EmailStr, Field, ValidationError

from vnjp_cms.cache import connect_redis
from vnjp_cms.config import Config, load_config
from vnjp_cms.db import connect, init_db, to_json, to_json_list
from vnjp_cms.errors import (
    bad_request,
    conflict,
    install_error_handlers,
    not_acceptable,
    not_found,
    unauthorized,
    unprocessable,
    validation_message,
)
from vnjp_cms.mailer import SmtpMailer, reset_email_html, verification_email_html
from vnjp_cms.schema import USERS
from vnjp_cms.uploads import save_upload
from vnjp_cms.util.forms import FormBody, first_file, form_body
from vnjp_cms.util.query import ListQuery, query_items

from vnjp_cms.auth import require_admin, verify_access_token
from vnjp_cms.auth.crud import (
    bootstrap_admin_if_needed,
    check_password,
    create_user,
    delete_user,
    get_user_by_email,
    get_user_by_id,
    public_user,
    mark_verified,
    set_password,
    update_user,
)
from vnjp_cms.auth.deps import get_cfg, get_db, get_mailer, get_store
from vnjp_cms.auth.onetime import (
    consume_login_link,
    consume_password_reset,
    consume_verification,
    create_login_link,
    create_password_reset,
    create_verification,
    discard_registration,
)
from vnjp_cms.auth.tokens import issue_token_pair, revoke_refresh_token, verify_refresh_token

from vnjp_cms.content import agriculture as agri
from vnjp_cms.content import contacts, news, tags
from vnjp_cms.content.years import list_years
from vnjp_cms.content.inbox import ContactMailRequest, RecruitRequest, send_contact_email, send_recruit_email
from vnjp_cms.content.media import COOPERATIVE, FEEDBACK, PARTNER, PERSONNEL, MediaSpec
from vnjp_cms.content.media import create_media, delete_media, get_media, list_media, update_media


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


app = FastAPI(title="VN/JP Corporate CMS", version="0.1.0")
cfg: Config = load_config()

# Clients connect lazily; tests swap these for in-memory fakes.
app.state.cfg = cfg
app.state.db = connect(cfg)
app.state.redis = connect_redis(cfg)
app.state.mailer = SmtpMailer(cfg)

_cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

install_error_handlers(app)
app.mount("/uploads", StaticFiles(directory=cfg.UPLOAD_DIR, check_dir=False), name="uploads")


@app.middleware("http")
async def _log_requests(request: Request, call_next: Any) -> Response:
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    _debug(f"{request.method} {request.url.path} {response.status_code} - {elapsed:.1f} ms")
    return response


@app.on_event("startup")
def _on_startup() -> None:
    db = app.state.db
    init_db(db)

    # Bootstrap first admin if needed (only when users collection is empty)
    bootstrap_admin_if_needed(db, app.state.cfg)
    _debug("startup complete")


def _created() -> Response:
    return Response(status_code=201)


def _no_content() -> Response:
    return Response(status_code=204)


def _ok() -> Response:
    return Response(status_code=200)


def _raw_json(raw: str) -> Response:
    return Response(content=raw, media_type="application/json")


# -----------------------------
# Health
# -----------------------------


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


# -----------------------------
# Auth
# -----------------------------


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    confirmPassword: str = Field(min_length=6)
    code: str = Field(min_length=1)
    currentUrl: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class VerifiedRequest(BaseModel):
    userId: str
    loginString: str


class RefreshRequest(BaseModel):
    refreshToken: Optional[str] = None


class PasswordResetRequest(BaseModel):
    email: str
    redirectUrl: str


class ResetPasswordRequest(BaseModel):
    userId: str
    resetString: str
    newPassword: str = Field(min_length=6)
    newConfirmPassword: str = Field(min_length=6)


@app.post("/auth/register", status_code=201)
def auth_register(
    payload: RegisterRequest,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    mailer: Any = Depends(get_mailer),
) -> Response:
    """Self-serve signup behind an invite code; the account stays unverified until the emailed link is used."""
    if not cfg.REGISTER_CODE or payload.code != cfg.REGISTER_CODE:
        raise not_acceptable("Code does not match.")
    if payload.password != payload.confirmPassword:
        raise conflict("Password and password confirm does not match.")

    email = str(payload.email).lower()
    try:
        user = create_user(db, name=payload.name, email=email, password=payload.password, role="user")
    except ValueError as e:
        if str(e) == "email_exists":
            raise conflict(f"{email} is already been registered.")
        raise bad_request(str(e))

    user_id = str(user["_id"])
    unique_string = create_verification(db, cfg, user_id, payload.currentUrl)
    link = f"{cfg.CURRENT_URL}auth/verify/{user_id}/{unique_string}"
    try:
        mailer.send(email, "Verify Your Email", verification_email_html(link))
    except Exception as e:
        discard_registration(db, user_id)
        _debug(f"Verification mail to {email} failed, registration rolled back: {e!r}")
        raise
    return _created()


@app.get("/auth/verify/{user_id}/{unique_string}")
def auth_verify_email(
    user_id: str,
    unique_string: str,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
) -> RedirectResponse:
    url_redirect = consume_verification(db, user_id, unique_string)
    mark_verified(db, user_id)
    login_string = create_login_link(db, cfg, user_id)
    return RedirectResponse(f"{url_redirect.rstrip('/')}/{user_id}/{login_string}")


@app.post("/auth/verified")
def auth_verified(
    payload: VerifiedRequest,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Dict[str, str]:
    """Exchange the one-time login string from the verification redirect for tokens."""
    consume_login_link(db, payload.userId, payload.loginString)
    return issue_token_pair(db, store, cfg, payload.userId)


@app.post("/auth/login")
def auth_login(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Dict[str, str]:
    try:
        creds = LoginRequest.model_validate(payload or {})
    except ValidationError:
        raise bad_request("Invalid Username/Password")

    user = get_user_by_email(db, str(creds.email))
    if user is None:
        raise not_found("User not registerd")
    if not user.get("verified"):
        raise bad_request("Email hasn't been verified yet. Check your inbox.")
    if not check_password(user, creds.password):
        raise unauthorized("Username/password not valid")

    return issue_token_pair(db, store, cfg, str(user["_id"]))


@app.post("/auth/refresh-token")
def auth_refresh_token(
    payload: Optional[RefreshRequest] = None,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Dict[str, str]:
    if payload is None or not payload.refreshToken:
        raise bad_request()
    user_id = verify_refresh_token(store, cfg, payload.refreshToken)
    return issue_token_pair(db, store, cfg, user_id)


@app.delete("/auth/logout/{refresh_token}", status_code=204)
def auth_logout(
    refresh_token: str,
    cfg: Config = Depends(get_cfg),
    store: Any = Depends(get_store),
) -> Response:
    user_id = verify_refresh_token(store, cfg, refresh_token)
    revoke_refresh_token(store, user_id)
    return _no_content()


@app.post("/auth/requestPasswordReset")
def auth_request_password_reset(
    payload: PasswordResetRequest,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    mailer: Any = Depends(get_mailer),
) -> Response:
    user = get_user_by_email(db, payload.email)
    if user is None:
        raise not_found("User not existed")
    if not user.get("verified"):
        raise bad_request("Email hasn't been verified yet. Check your inbox.")

    user_id = str(user["_id"])
    reset_string = create_password_reset(db, cfg, user_id)
    link = f"{payload.redirectUrl.rstrip('/')}/{user_id}/{reset_string}"
    mailer.send(str(user["email"]), "Password Reset", reset_email_html(link))
    return _ok()


@app.post("/auth/resetPassword")
def auth_reset_password(payload: ResetPasswordRequest, db: Any = Depends(get_db)) -> Response:
    if payload.newPassword != payload.newConfirmPassword:
        raise conflict("Password and password confirm does not match.")
    consume_password_reset(db, payload.userId, payload.resetString)
    set_password(db, payload.userId, payload.newPassword)
    return _ok()


@app.get("/auth/me")
def auth_me(payload: Dict[str, Any] = Depends(verify_access_token), db: Any = Depends(get_db)) -> Dict[str, Any]:
    user = get_user_by_id(db, payload.get("userId"))
    if user is None:
        raise not_found("User does not exist.")
    return {"profile": public_user(user)}


_USER_QUERY = ListQuery(
    search_fields=("name", "email"),
    allowed_fields=("verified", "role", "gender", "createdAt"),
    date_fields=("createdAt",),
)


@app.get("/auth/")
def admin_list_users(
    request: Request,
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Dict[str, Any]:
    filtered_count, users = _USER_QUERY.run(db[USERS], query_items(request.query_params))
    return {"filteredCount": filtered_count, "users": [public_user(u) for u in users]}


@app.post("/auth/update/{user_id}")
def admin_update_user(
    user_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise not_found()
    try:
        update_user(db, user, body.fields)
    except ValidationError as e:
        raise bad_request(validation_message(e))
    return _ok()


@app.delete("/auth/delete/{user_id}", status_code=204)
def admin_delete_user(
    user_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise not_found()
    revoke_refresh_token(store, str(user["_id"]))
    delete_user(db, user["_id"])
    return _no_content()


# -----------------------------
# News
# -----------------------------


@app.post("/news/admin/news/create", status_code=201)
def admin_create_news(
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
) -> Dict[str, Any]:
    doc = news.create_news(db, cfg, body.fields, body.files)
    return {"id": str(doc["_id"])}


@app.post("/news/admin/news/update/{news_id}")
def admin_update_news(
    news_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Dict[str, Any]:
    doc = news.update_news(db, cfg, store, news_id, body.fields, body.files)
    return {"id": str(doc["_id"])}


@app.delete("/news/admin/news/delete/{news_id}", status_code=204)
def admin_delete_news(
    news_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    news.delete_news(db, cfg, store, news_id)
    return _no_content()


@app.post("/news/admin/news-item/create/{lang}/{news_id}")
def admin_create_news_item(
    lang: str,
    news_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    news.create_news_item(db, cfg, store, lang, news_id, body.fields, body.files)
    return _ok()


@app.post("/news/admin/news-item/update/{news_id}/{item_id}")
def admin_update_news_item(
    news_id: str,
    item_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    news.update_news_item(db, cfg, store, news_id, item_id, body.fields, body.files)
    return _ok()


@app.delete("/news/admin/news-item/delete/{news_id}/{item_id}", status_code=204)
def admin_delete_news_item(
    news_id: str,
    item_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    news.delete_news_item(db, cfg, store, news_id, item_id)
    return _no_content()


@app.get("/news/detail/{news_id}")
def news_detail(news_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"news": to_json(news.get_news(db, news_id))}


@app.get("/news/detail-full/{news_id}")
def news_detail_full(
    news_id: str,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    return _raw_json(news.news_detail_full(db, cfg, store, news_id))


@app.get("/news/news-item/detail/{item_id}")
def news_item_detail(item_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"newsItem": to_json(news.get_news_item(db, item_id))}


@app.get("/news/year/all")
def news_years(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"years": to_json_list(list_years(db, query_items(request.query_params)))}


@app.get("/news", include_in_schema=False)
@app.get("/news/")
def news_list(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    filtered_count, docs = news.list_news(db, query_items(request.query_params))
    return {"filteredCount": filtered_count, "newss": to_json_list(docs)}


# -----------------------------
# Agriculture (+ tags)
# -----------------------------


@app.post("/agriculture/admin/agriculture/create", status_code=201)
def admin_create_agriculture(
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
) -> Dict[str, Any]:
    doc = agri.create_agriculture(db, cfg, body.fields, body.files)
    return {"id": str(doc["_id"])}


@app.post("/agriculture/admin/agriculture/update/{agriculture_id}")
def admin_update_agriculture(
    agriculture_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Dict[str, Any]:
    doc = agri.update_agriculture(db, cfg, store, agriculture_id, body.fields, body.files)
    return {"id": str(doc["_id"])}


@app.delete("/agriculture/admin/agriculture/delete/{agriculture_id}", status_code=204)
def admin_delete_agriculture(
    agriculture_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    agri.delete_agriculture(db, cfg, store, agriculture_id)
    return _no_content()


@app.post("/agriculture/admin/agriculture-item/create/{lang}/{agriculture_id}")
def admin_create_agriculture_item(
    lang: str,
    agriculture_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    agri.create_agriculture_item(db, cfg, store, lang, agriculture_id, body.fields, body.files)
    return _ok()


@app.post("/agriculture/admin/agriculture-item/update/{agriculture_id}/{item_id}")
def admin_update_agriculture_item(
    agriculture_id: str,
    item_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    agri.update_agriculture_item(db, cfg, store, agriculture_id, item_id, body.fields, body.files)
    return _ok()


@app.delete("/agriculture/admin/agriculture-item/delete/{agriculture_id}/{item_id}", status_code=204)
def admin_delete_agriculture_item(
    agriculture_id: str,
    item_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    agri.delete_agriculture_item(db, cfg, store, agriculture_id, item_id)
    return _no_content()


@app.post("/agriculture/admin/tag/create", status_code=201)
def admin_create_tag(
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    tags.create_tag(db, body.fields)
    return _created()


@app.post("/agriculture/admin/tag/update/{tag_id}")
def admin_update_tag(
    tag_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    tags.update_tag(db, tag_id, body.fields)
    return _ok()


@app.delete("/agriculture/admin/tag/delete/{tag_id}", status_code=204)
def admin_delete_tag(
    tag_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    tags.delete_tag(db, tag_id)
    return _no_content()


@app.get("/agriculture/tag/full/all")
def tag_list(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    filtered_count, docs = tags.list_tags(db, query_items(request.query_params))
    return {"filteredCount": filtered_count, "tags": to_json_list(docs)}


@app.get("/agriculture/tag/detail/{tag_id}")
def tag_detail(tag_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"tag": to_json(tags.get_tag(db, tag_id))}


@app.get("/agriculture/detail/{agriculture_id}")
def agriculture_detail(agriculture_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return to_json(agri.agriculture_detail(db, agriculture_id))


@app.get("/agriculture/detail-full/{agriculture_id}")
def agriculture_detail_full(
    agriculture_id: str,
    cfg: Config = Depends(get_cfg),
    db: Any = Depends(get_db),
    store: Any = Depends(get_store),
) -> Response:
    return _raw_json(agri.agriculture_detail_full(db, cfg, store, agriculture_id))


@app.get("/agriculture/agriculture-item/detail/{item_id}")
def agriculture_item_detail(item_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"agricultureItem": to_json(agri.get_agriculture_item(db, item_id))}


def _agriculture_page(request: Request, db: Any, lang: Optional[str] = None, tag: Optional[str] = None) -> Dict[str, Any]:
    filtered_count, docs = agri.list_agricultures(db, query_items(request.query_params), lang=lang, tag=tag)
    return {"filteredCount": filtered_count, "agricultures": to_json_list(docs)}


@app.get("/agriculture", include_in_schema=False)
@app.get("/agriculture/")
def agriculture_list(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return _agriculture_page(request, db)


@app.get("/agriculture/{lang}")
def agriculture_list_lang(lang: str, request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return _agriculture_page(request, db, lang=lang)


@app.get("/agriculture/{lang}/{tag}")
def agriculture_list_tag(lang: str, tag: str, request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return _agriculture_page(request, db, lang=lang, tag=tag)


# -----------------------------
# Single-media collections: personnel, feedback, partner, cooperative
# -----------------------------


def _register_media_routes(prefix: str, spec: MediaSpec, *, with_detail: bool) -> None:
    """Create / update / delete / list routes for one single-upload collection."""

    def admin_create(
        body: FormBody = Depends(form_body),
        _admin: Dict[str, Any] = Depends(require_admin),
        cfg: Config = Depends(get_cfg),
        db: Any = Depends(get_db),
    ) -> Response:
        create_media(db, cfg, spec, body.fields, body.files)
        return _created()

    def admin_update(
        doc_id: str,
        body: FormBody = Depends(form_body),
        _admin: Dict[str, Any] = Depends(require_admin),
        cfg: Config = Depends(get_cfg),
        db: Any = Depends(get_db),
    ) -> Response:
        update_media(db, cfg, spec, doc_id, body.fields, body.files)
        return _ok()

    def admin_delete(
        doc_id: str,
        _admin: Dict[str, Any] = Depends(require_admin),
        db: Any = Depends(get_db),
    ) -> Response:
        delete_media(db, spec, doc_id)
        return _no_content()

    def detail(doc_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
        return {spec.name: to_json(get_media(db, spec, doc_id))}

    def listing(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
        filtered_count, docs = list_media(db, spec, query_items(request.query_params))
        return {"filteredCount": filtered_count, spec.plural: to_json_list(docs)}

    app.add_api_route(f"{prefix}/admin/create", admin_create, methods=["POST"], status_code=201, name=f"{spec.name}_create")
    app.add_api_route(f"{prefix}/admin/update/{{doc_id}}", admin_update, methods=["POST"], name=f"{spec.name}_update")
    app.add_api_route(
        f"{prefix}/admin/delete/{{doc_id}}", admin_delete, methods=["DELETE"], status_code=204, name=f"{spec.name}_delete"
    )
    if with_detail:
        app.add_api_route(f"{prefix}/admin/{{doc_id}}", detail, methods=["GET"], name=f"{spec.name}_detail")
    app.add_api_route(f"{prefix}/", listing, methods=["GET"], name=f"{spec.name}_list")
    app.add_api_route(prefix, listing, methods=["GET"], include_in_schema=False)


_register_media_routes("/personnel", PERSONNEL, with_detail=True)
_register_media_routes("/feedback", FEEDBACK, with_detail=True)
_register_media_routes("/partner", PARTNER, with_detail=False)
_register_media_routes("/cooperative", COOPERATIVE, with_detail=False)


# -----------------------------
# Contacts
# -----------------------------


@app.post("/contact/admin/create", status_code=201)
def admin_create_contact(
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    contacts.create_contact(db, body.fields)
    return _created()


@app.post("/contact/admin/update/{contact_id}")
def admin_update_contact(
    contact_id: str,
    body: FormBody = Depends(form_body),
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    contacts.update_contact(db, contact_id, body.fields)
    return _ok()


@app.delete("/contact/admin/delete/{contact_id}", status_code=204)
def admin_delete_contact(
    contact_id: str,
    _admin: Dict[str, Any] = Depends(require_admin),
    db: Any = Depends(get_db),
) -> Response:
    contacts.delete_contact(db, contact_id)
    return _no_content()


@app.get("/contact/admin/{contact_id}")
def contact_detail(contact_id: str, db: Any = Depends(get_db)) -> Dict[str, Any]:
    return {"contact": to_json(contacts.get_contact(db, contact_id))}


@app.get("/contact", include_in_schema=False)
@app.get("/contact/")
def contact_list(request: Request, db: Any = Depends(get_db)) -> Dict[str, Any]:
    filtered_count, docs = contacts.list_contacts(db, query_items(request.query_params))
    return {"filteredCount": filtered_count, "contacts": to_json_list(docs)}


# -----------------------------
# Email (recruitment + contact form)
# -----------------------------


@app.post("/email/recruit")
def email_recruit(
    body: FormBody = Depends(form_body),
    cfg: Config = Depends(get_cfg),
    mailer: Any = Depends(get_mailer),
) -> Response:
    """Forward a job application, CV attached, to the company inbox."""
    try:
        req = RecruitRequest.model_validate(body.fields)
    except ValidationError as e:
        raise unprocessable(validation_message(e))
    cv = first_file(body.files, "file")
    if cv is None:
        raise bad_request("file required.")

    path = save_upload(cfg, "recruits", cv)
    send_recruit_email(mailer, cfg, req, path, cv.filename or "cv")
    return _ok()


@app.post("/email/contact")
def email_contact(
    payload: ContactMailRequest,
    cfg: Config = Depends(get_cfg),
    mailer: Any = Depends(get_mailer),
) -> Response:
    send_contact_email(mailer, cfg, payload)
    return _ok()
