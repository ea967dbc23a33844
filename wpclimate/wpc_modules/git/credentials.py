"""Git credential records for remote operations.

A credential knows how to turn a git operation into an
authenticated command line and which environment variables that
command needs. Records are persisted as plain JSON in
.settings/gitConf.json, tagged with CREDENTIAL_TYPE.
"""
from __future__ import annotations

import json
import logging
import shlex
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Generic, Literal, Protocol, TypeVar
from urllib.parse import quote, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.errors import ClimateError, ErrorType

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CredentialsType(str, Enum):
    SSH = "SSH"
    HTTPS = "HTTPS"


class SshCredentialModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    credential_type: Literal["SSH"] = Field(default="SSH", alias="CREDENTIAL_TYPE")
    repo_name: NonBlank = Field(alias="REPO_NAME")
    repo_url: NonBlank = Field(alias="REPO_URL")
    private_cert_path: NonBlank = Field(alias="PRIVATE_CERT_PATH")
    public_cert_path: str | None = Field(default=None, alias="PUBLIC_CERT_PATH")


class HttpsCredentialModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    credential_type: Literal["HTTPS"] = Field(default="HTTPS", alias="CREDENTIAL_TYPE")
    repo_name: NonBlank = Field(alias="REPO_NAME")
    repo_url: NonBlank = Field(alias="REPO_URL")
    username: NonBlank = Field(alias="USERNAME")
    password: NonBlank = Field(alias="PASSWORD")


class Credential(Protocol):
    """What remote git commands need from a credential."""

    credential_type: CredentialsType

    def configure(self, fields: Mapping[str, str]) -> IOResult[BaseModel, ClimateError]: ...

    def read(self) -> IOResult[BaseModel, ClimateError]: ...

    def exists(self) -> bool: ...

    def update(self, fields: Mapping[str, str]) -> IOResult[BaseModel, ClimateError]: ...

    def get_git_command(
        self,
        operation: str,
        *params: str,
        url: str | None = None,
    ) -> IOResult[str, ClimateError]: ...

    def get_git_environment(self) -> IOResult[dict[str, str], ClimateError]: ...


ModelT = TypeVar("ModelT", SshCredentialModel, HttpsCredentialModel)


def _missing(message: str, **context: object) -> IOFailure:
    return IOFailure(
        ClimateError(
            source="git.credentials",
            error_type=ErrorType.CONFIGURATION_MISSING,
            message=message,
            context=context,
        ),
    )


class _StoredCredential(Generic[ModelT]):
    """Shared persistence for credential records.

    fields maps the user-facing field names (name, url, ...)
    to model attributes.
    """

    credential_type: CredentialsType
    model_type: type[ModelT]
    fields: dict[str, str]

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._model: ModelT | None = None

    def _validate(self, values: Mapping[str, object]) -> IOResult[ModelT, ClimateError]:
        try:
            return IOSuccess(self.model_type.model_validate(values))
        except ValidationError as exc:
            return _missing(
                f"Invalid {self.credential_type.value} configuration:"
                f" {exc.error_count()} field error(s)",
                errors=[".".join(map(str, e["loc"])) for e in exc.errors()],
            )

    def _from_fields(self, fields: Mapping[str, str]) -> dict[str, object]:
        return {
            self.fields[key]: value
            for key, value in fields.items()
            if key in self.fields
        }

    def _save(self, model: ModelT) -> IOResult[ModelT, ClimateError]:
        def _cache(_: Path) -> IOResult[ModelT, ClimateError]:
            self._model = model
            logger.info(
                "%s credentials saved to %s",
                self.credential_type.value, self.config_path,
            )
            return IOSuccess(model)

        return io_ops.write_file(
            self.config_path,
            model.model_dump_json(by_alias=True, indent=2),
        ).bind(_cache)

    def _load(self) -> IOResult[ModelT, ClimateError]:
        def _parse(text: str) -> IOResult[ModelT, ClimateError]:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                return _missing(
                    f"Corrupt credential file {self.config_path}: {exc}",
                )
            return self._validate(data)

        return (
            io_ops.read_file(self.config_path)
            .lash(
                lambda err: _missing(
                    f"No {self.credential_type.value} credentials configured",
                    cause=str(err),
                ),
            )
            .bind(_parse)
        )

    def configure(self, fields: Mapping[str, str]) -> IOResult[ModelT, ClimateError]:
        """Validate and persist a new record."""
        if not fields:
            return _missing(
                f"The {self.credential_type.value} configuration is empty",
            )
        return self._validate(self._normalize(self._from_fields(fields))).bind(self._save)

    def read(self) -> IOResult[ModelT, ClimateError]:
        """Return the cached record, loading it from disk on first use."""
        if self._model is not None:
            return IOSuccess(self._model)

        def _cache(model: ModelT) -> IOResult[ModelT, ClimateError]:
            self._model = model
            return IOSuccess(model)

        return self._load().bind(_cache)

    def exists(self) -> bool:
        """True if a valid record is stored on disk."""
        result = self._load()
        if isinstance(result, IOFailure):
            self._model = None
            return False
        self._model = unsafe_perform_io(result.unwrap())
        return True

    def update(self, fields: Mapping[str, str]) -> IOResult[ModelT, ClimateError]:
        """Merge fields into the stored record. Empty fields change nothing."""
        def _merge(current: ModelT) -> IOResult[ModelT, ClimateError]:
            if not fields:
                return IOSuccess(current)
            merged = {
                **current.model_dump(),
                **self._normalize(self._from_fields(fields)),
            }
            return self._validate(merged).bind(self._save)

        return self.read().bind(_merge)

    def _normalize(self, values: dict[str, object]) -> dict[str, object]:
        return values


class SshCredentials(_StoredCredential[SshCredentialModel]):
    """Key-based authentication through GIT_SSH_COMMAND."""

    credential_type = CredentialsType.SSH
    model_type = SshCredentialModel
    fields = {
        "name": "repo_name",
        "url": "repo_url",
        "privPath": "private_cert_path",
        "pubPath": "public_cert_path",
    }

    def get_git_command(
        self,
        operation: str,
        *params: str,
        url: str | None = None,
    ) -> IOResult[str, ClimateError]:
        def _build(model: SshCredentialModel) -> IOResult[str, ClimateError]:
            parts = ["git", operation, "--progress", *params, shlex.quote(url or model.repo_url)]
            return IOSuccess(" ".join(parts))

        return self.read().bind(_build)

    def get_git_environment(self) -> IOResult[dict[str, str], ClimateError]:
        def _env(model: SshCredentialModel) -> IOResult[dict[str, str], ClimateError]:
            ssh = (
                f"ssh -i {shlex.quote(model.private_cert_path)}"
                " -o StrictHostKeyChecking=no"
                " -o UserKnownHostsFile=/dev/null"
            )
            return IOSuccess({"GIT_SSH_COMMAND": ssh, "GIT_FLUSH": "1"})

        return self.read().bind(_env)


def strip_url_credentials(url: str) -> str:
    """Drop any user:password@ part from a URL."""
    parts = urlsplit(url.strip())
    if "@" not in parts.netloc:
        return url.strip()
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=host))


class HttpsCredentials(_StoredCredential[HttpsCredentialModel]):
    """Username and password injected into an https:// remote URL."""

    credential_type = CredentialsType.HTTPS
    model_type = HttpsCredentialModel
    fields = {
        "name": "repo_name",
        "url": "repo_url",
        "username": "username",
        "password": "password",
    }

    def _normalize(self, values: dict[str, object]) -> dict[str, object]:
        url = values.get("repo_url")
        if isinstance(url, str):
            values = {**values, "repo_url": strip_url_credentials(url)}
        return values

    def get_git_command(
        self,
        operation: str,
        *params: str,
        url: str | None = None,
    ) -> IOResult[str, ClimateError]:
        def _build(model: HttpsCredentialModel) -> IOResult[str, ClimateError]:
            remote = strip_url_credentials(url or model.repo_url)
            if not remote.startswith("https://"):
                return _missing(
                    f"HTTPS credentials need an https:// URL, got {remote}",
                )
            auth = f"{quote(model.username, safe='')}:{quote(model.password, safe='')}"
            authenticated = f"https://{auth}@{remote[len('https://'):]}"
            parts = ["git", operation, "-q", "--progress", *params, shlex.quote(authenticated)]
            return IOSuccess(" ".join(parts))

        return self.read().bind(_build)

    def get_git_environment(self) -> IOResult[dict[str, str], ClimateError]:
        return self.read().map(lambda _: {"GIT_FLUSH": "1"})


_CREDENTIAL_TYPES: dict[str, type[SshCredentials] | type[HttpsCredentials]] = {
    CredentialsType.SSH.value: SshCredentials,
    CredentialsType.HTTPS.value: HttpsCredentials,
}


def load_credential(config_path: Path) -> IOResult[Credential | None, ClimateError]:
    """Return the stored credential, or None when nothing is configured."""
    def _pick(text: str) -> IOResult[Credential | None, ClimateError]:
        try:
            kind = json.loads(text).get("CREDENTIAL_TYPE", "")
        except (json.JSONDecodeError, AttributeError) as exc:
            return _missing(f"Corrupt credential file {config_path}: {exc}")
        credential_class = _CREDENTIAL_TYPES.get(str(kind).upper())
        if credential_class is None:
            return _missing(
                f"Unknown credential type '{kind}' in {config_path}",
            )
        return IOSuccess(credential_class(config_path))

    def _absent(error: ClimateError) -> IOResult[str | None, ClimateError]:
        if error.error_type == "FileNotFoundError":
            return IOSuccess(None)
        return IOFailure(error)

    return (
        io_ops.read_file(config_path)
        .lash(_absent)
        .bind(lambda text: _pick(text) if text is not None else IOSuccess(None))
    )
