from pydantic import BaseModel, Field


class PasswordRules(BaseModel):
    min_length: int = 8
    pattern: str


class AuthRules(BaseModel):
    token_ttl_minutes: int
    email_pattern: str
    password: PasswordRules
    default_title: str = "Alguien interesante"


class RolesRules(BaseModel):
    valid: list[str]
    default: str
    # capability -> roles that hold it, e.g. "publications:review": [moderador, administrador]
    capabilities: dict[str, list[str]]


class UploadsRules(BaseModel):
    max_upload_bytes: int
    allowlist_extensions: list[str]
    allowlist_mime_types: list[str]


class ResizeBox(BaseModel):
    width: int
    height: int
    fit: str = "inside"


class ImagesRules(BaseModel):
    cover: ResizeBox
    body: ResizeBox
    profile: ResizeBox
    jpeg_quality: int = Field(default=80, ge=1, le=95)


class FontFiles(BaseModel):
    regular: str
    bold: str
    italic: str


class RenderRules(BaseModel):
    page_width: float = 612
    page_height: float = 792
    margin: float = 72
    body_font_size: float = 12
    fonts: FontFiles
    logo_path: str | None = None
    date_format: str = "%d/%m/%Y"


class NotificationsRules(BaseModel):
    notify_by_email_default: bool = True
    page_size: int = 20


class Rules(BaseModel):
    auth: AuthRules
    roles: RolesRules
    uploads: UploadsRules
    images: ImagesRules
    render: RenderRules
    notifications: NotificationsRules
