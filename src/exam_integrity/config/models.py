"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_MAX_CONTENT_BYTES = 10 * 1024 * 1024
DEFAULT_ZERO_SCORE_COMMENT = "Zero score confirmed due to integrity violations"


@dataclass
class StorageSettings:
    """Where uploads land and which uploads are accepted."""

    uploads_dir: Path = Path("uploads")
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_extensions: list[str] = field(
        default_factory=lambda: [".rar", ".zip", ".doc", ".docx"]
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StorageSettings":
        return cls(
            uploads_dir=Path(data.get("uploads_dir", "uploads")),
            max_upload_bytes=data.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES),
            allowed_extensions=[
                ext.lower() for ext in data.get("allowed_extensions", [".rar", ".zip", ".doc", ".docx"])
            ],
        )


@dataclass
class ScanSettings:
    """Violation scanning settings."""

    max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES
    keywords_file: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanSettings":
        keywords_file = data.get("keywords_file")
        return cls(
            max_content_bytes=data.get("max_content_bytes", DEFAULT_MAX_CONTENT_BYTES),
            keywords_file=Path(keywords_file) if keywords_file else None,
        )


@dataclass
class SubmissionServiceSettings:
    """Remote submission service connection settings."""

    url: str | None = None
    timeout: float = 30.0
    token_env_var: str = "SUBMISSION_SERVICE_TOKEN"

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubmissionServiceSettings":
        return cls(
            url=data.get("url"),
            timeout=data.get("timeout", 30.0),
            token_env_var=data.get("token_env_var", "SUBMISSION_SERVICE_TOKEN"),
        )


@dataclass
class GradingSettings:
    """Grading workflow settings."""

    zero_score_comment: str = DEFAULT_ZERO_SCORE_COMMENT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GradingSettings":
        return cls(
            zero_score_comment=data.get("zero_score_comment", DEFAULT_ZERO_SCORE_COMMENT),
        )


@dataclass
class IntegrityConfig:
    """Complete system configuration."""

    storage: StorageSettings = field(default_factory=StorageSettings)
    scan: ScanSettings = field(default_factory=ScanSettings)
    submission_service: SubmissionServiceSettings = field(default_factory=SubmissionServiceSettings)
    grading: GradingSettings = field(default_factory=GradingSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "IntegrityConfig":
        data = data or {}
        return cls(
            storage=StorageSettings.from_dict(data.get("storage") or {}),
            scan=ScanSettings.from_dict(data.get("scan") or {}),
            submission_service=SubmissionServiceSettings.from_dict(data.get("submission_service") or {}),
            grading=GradingSettings.from_dict(data.get("grading") or {}),
        )
