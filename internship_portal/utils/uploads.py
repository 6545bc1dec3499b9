"""
Upload Checks

Files never enter the portal core. Before a selected file is handed to the
upload provider its MIME type and size are checked against the configured
allow-list; the provider returns a reference URL that is stored verbatim on
the owning record (CV, motivation letter, logo, report...).
"""

import fnmatch
import uuid
from abc import ABC, abstractmethod

import structlog
from pydantic import BaseModel

from internship_portal.models.config import UploadPolicy
from internship_portal.utils.errors import FormValidationError

logger = structlog.get_logger(__name__)


class DocumentRef(BaseModel):
    """A checked file handed off to the upload provider."""

    kind: str
    filename: str
    mime_type: str
    size: int
    url: str


class UploadProvider(ABC):
    """Stores a file somewhere and returns the URL to reference it by."""

    @abstractmethod
    def upload(self, kind: str, filename: str, content: bytes) -> str:
        """Store ``content`` and return its reference URL."""


class ReferenceOnlyUploader(UploadProvider):
    """Mints reference URLs without storing content, like the demo frontend."""

    def __init__(self, base_url: str = "uploads"):
        self.base_url = base_url.rstrip("/")

    def upload(self, kind: str, filename: str, content: bytes) -> str:
        return f"{self.base_url}/{kind}/{uuid.uuid4().hex}-{filename}"


def mime_type_accepted(mime_type: str, patterns: list[str]) -> bool:
    """Match a MIME type against patterns such as ``application/pdf`` or ``image/*``."""
    mime_type = mime_type.lower().strip()
    return any(fnmatch.fnmatchcase(mime_type, pattern.lower()) for pattern in patterns)


def check_upload(policy: UploadPolicy, kind: str, filename: str, mime_type: str, size: int) -> None:
    """
    Check a file against the upload policy.

    Args:
        policy: Upload policy from PortalSettings
        kind: Document kind (e.g. "cv", "logo")
        filename: Original file name
        mime_type: Declared MIME type
        size: Size in bytes

    Raises:
        FormValidationError: If the kind is unknown, the type is not accepted,
            the file is empty or larger than the policy allows
    """
    patterns = policy.accepted_types.get(kind)
    if patterns is None:
        raise FormValidationError(f"Unknown document kind: {kind}", field=kind)
    if not filename:
        raise FormValidationError("Please choose a file", field=kind)
    if size <= 0:
        raise FormValidationError(f"{filename} is empty", field=kind)
    if size > policy.max_size_bytes:
        raise FormValidationError(
            f"{filename} is larger than {policy.max_size_bytes // (1024 * 1024)} MB",
            field=kind,
        )
    if not mime_type_accepted(mime_type, patterns):
        raise FormValidationError(
            f"{filename} has type {mime_type}; accepted: {', '.join(patterns)}",
            field=kind,
        )


def accept_upload(
    policy: UploadPolicy,
    provider: UploadProvider,
    kind: str,
    filename: str,
    mime_type: str,
    content: bytes,
) -> DocumentRef:
    """Check a file and hand it to the provider, returning the stored reference."""
    check_upload(policy, kind, filename, mime_type, len(content))
    url = provider.upload(kind, filename, content)
    logger.info("upload_accepted", kind=kind, filename=filename, mime_type=mime_type, url=url)
    return DocumentRef(
        kind=kind, filename=filename, mime_type=mime_type, size=len(content), url=url
    )
