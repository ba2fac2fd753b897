"""Visitor mail: job applications (with CV attached) and contact requests.

Both go to the company inbox (`AUTH_EMAIL_TO`); nothing is stored in MongoDB.
"""

from __future__ import annotations

from html import escape
from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field

from vnjp_cms.config import Config
from vnjp_cms.mailer import Attachment

# 10-digit local phone number
PHONE_PATTERN = r"^[0-9]{10}$"


class RecruitRequest(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    birthday: str = Field(min_length=1)
    university: Optional[str] = None
    major: str = Field(min_length=1)
    phone: str = Field(pattern=PHONE_PATTERN)
    email: EmailStr
    content: str = Field(min_length=1)


class ContactMailRequest(BaseModel):
    name: str = Field(min_length=1)
    company: Optional[str] = None
    address: Optional[str] = None
    phone: str = Field(pattern=PHONE_PATTERN)
    email: EmailStr
    content: str = Field(min_length=1)


def _rows(title: str, rows: Dict[str, Any]) -> str:
    lines = [f"<p><b>{escape(title)}</b></p>"]
    for label, value in rows.items():
        lines.append(f"<p><i>{escape(label)}: </i><b>{escape(str(value or ''))}</b></p>")
    return "\n".join(lines)


def send_recruit_email(mailer: Any, cfg: Config, req: RecruitRequest, cv_path: str, cv_name: str) -> None:
    html = _rows(
        "Thông tin ứng viên:",
        {
            "Họ tên": req.name,
            "Địa chỉ": req.address,
            "Giới tính": req.gender,
            "Năm sinh": req.birthday,
            "Trường tốt nghiệp": req.university,
            "Chuyên ngành": req.major,
            "Điện thoại": req.phone,
            "Email": req.email,
            "Nội dung": req.content,
        },
    )
    mailer.send(
        str(cfg.AUTH_EMAIL_TO or ""),
        f"Nộp CV - Đăng ký ứng tuyển từ {req.name}",
        html,
        attachments=[Attachment(filename=cv_name, path=cv_path)],
    )


def send_contact_email(mailer: Any, cfg: Config, req: ContactMailRequest) -> None:
    html = _rows(
        "Thông tin liên lạc:",
        {
            "Họ tên": req.name,
            "Tên công ty": req.company,
            "Địa chỉ": req.address,
            "Điện thoại": req.phone,
            "Email": req.email,
            "Nội dung": req.content,
        },
    )
    mailer.send(str(cfg.AUTH_EMAIL_TO or ""), f"Liên hệ từ {req.name}", html)
