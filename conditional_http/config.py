"""Configuration utilities for precondition handling.

This module loads application configuration with the following rules:
- Primary source: `conditional_config.json` at the working directory root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce allowed values.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from conditional_http.logic.methods import READ_ONLY_METHODS, MethodClassifier
from conditional_http.models.precondition import BAD_REQUEST, PRECONDITION_REQUIRED, PreconditionResult


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("conditional_config.json")
logger = logging.getLogger(__name__)

MISSING_RESULT_CHOICES = {"precondition_required", "bad_request", "method_default"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class PreconditionConfig(BaseModel):
    missing_result: str = Field(default="precondition_required")
    read_only_methods: List[str] = Field(default_factory=lambda: sorted(READ_ONLY_METHODS))
    responder_enabled: bool = Field(default=True)

    @field_validator("missing_result")
    @classmethod
    def missing_result_must_be_allowed(cls, v: str) -> str:
        v = str(v).strip().lower()
        if v not in MISSING_RESULT_CHOICES:
            raise ValueError(f"precondition.missing_result must be one of {sorted(MISSING_RESULT_CHOICES)}")
        return v

    @field_validator("read_only_methods")
    @classmethod
    def methods_must_be_tokens(cls, v: List[str]) -> List[str]:
        methods = [str(m).strip().upper() for m in v if str(m).strip()]
        if not methods:
            raise ValueError("precondition.read_only_methods must list at least one method")
        return methods

    def classifier(self) -> MethodClassifier:
        return MethodClassifier(self.read_only_methods)

    def missing_precondition_result(
        self, method: str, classifier: Optional[MethodClassifier] = None
    ) -> PreconditionResult:
        """Result used when a request carries nothing that can be evaluated.

        Read-only methods always fall back to their method default (pass);
        the configured choice applies to mutating methods. Pass the
        evaluator's ``classifier`` so both agree on what a read is.
        """
        classifier = classifier or self.classifier()
        if not classifier.is_mutating(method) or self.missing_result == "method_default":
            return classifier.default_result_for_method(method)
        if self.missing_result == "bad_request":
            return BAD_REQUEST
        return PRECONDITION_REQUIRED


class AppConfig(BaseModel):
    precondition: PreconditionConfig = Field(default_factory=PreconditionConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) conditional_config.json at the working directory root
    4) Defaults
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(item) for item in cur)
        return str(cur) if cur is not None else default

    missing_result = (
        _env("PRECONDITION_MISSING_RESULT")
        or _read_config_file("precondition.missing_result")
        or _base("precondition.missing_result", "precondition_required")
    )
    methods_text = (
        _env("PRECONDITION_READ_ONLY_METHODS")
        or _read_config_file("precondition.read_only_methods")
        or _base("precondition.read_only_methods", ",".join(sorted(READ_ONLY_METHODS)))
    )
    enabled_text = (
        _env("PRECONDITION_RESPONDER_ENABLED")
        or _read_config_file("precondition.responder_enabled")
        or _base("precondition.responder_enabled", "true")
    )

    try:
        return AppConfig(
            precondition=PreconditionConfig(
                missing_result=missing_result,
                read_only_methods=[m for m in str(methods_text).split(",")],
                responder_enabled=str(enabled_text).strip().lower() == "true",
            )
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "PreconditionConfig",
    "MISSING_RESULT_CHOICES",
    "load_config",
]
